"""员工名录 API 测试

测试内容：
1. 新增/查询/更新/删除的 HTTP 契约与权限
2. 重复员工编号返回 409
3. 请求头缺少员工编号时从名录补全，员工看到分配给自己的任务
4. 创建任务时从名录补全负责人姓名
"""

from httpx import AsyncClient


def _employee_body(**overrides) -> dict:
    body = {
        "user_id": "u-jordan",
        "employee_id": "EMP010",
        "name": "Jordan Lee",
        "email": "jordan@example.com",
        "position": "Analyst",
        "department": "Finance",
        "join_date": "2023-02-01",
    }
    body.update(overrides)
    return body


async def _add(client: AsyncClient, headers: dict, **overrides) -> dict:
    resp = await client.post("/api/employees", json=_employee_body(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestEmployeeCrud:
    async def test_admin_adds_and_lists(self, client, admin_headers, alice_headers):
        data = await _add(client, admin_headers)
        assert data["employee_id"] == "EMP010"
        assert data["join_date"] == "2023-02-01"

        resp = await client.get("/api/employees", headers=alice_headers)
        assert [e["employee_id"] for e in resp.json()["employees"]] == ["EMP010"]

    async def test_employee_cannot_add(self, client, alice_headers):
        resp = await client.post("/api/employees", json=_employee_body(), headers=alice_headers)
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Only admins can add employees"

    async def test_duplicate_employee_id_conflict(self, client, admin_headers):
        await _add(client, admin_headers)
        resp = await client.post(
            "/api/employees",
            json=_employee_body(user_id="u-other", name="Other"),
            headers=admin_headers,
        )
        assert resp.status_code == 409
        assert resp.json() == {
            "error": {"code": "EMPLOYEE_EXISTS", "message": "Employee ID already exists"}
        }

    async def test_search(self, client, admin_headers):
        await _add(client, admin_headers)
        await _add(
            client,
            admin_headers,
            user_id="u-sam",
            employee_id="EMP011",
            name="Sam Ortiz",
            department="Support",
        )
        resp = await client.get(
            "/api/employees", params={"search": "support"}, headers=admin_headers
        )
        assert [e["name"] for e in resp.json()["employees"]] == ["Sam Ortiz"]

    async def test_anonymous_sees_nothing(self, client, admin_headers):
        await _add(client, admin_headers)
        resp = await client.get("/api/employees")
        assert resp.json() == {"employees": []}
        resp = await client.get("/api/employees/EMP010")
        assert resp.status_code == 404

    async def test_update(self, client, admin_headers, alice_headers):
        await _add(client, admin_headers)
        resp = await client.patch(
            "/api/employees/EMP010", json={"position": "Lead"}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["position"] == "Lead"

        resp = await client.patch(
            "/api/employees/EMP010", json={"position": "CEO"}, headers=alice_headers
        )
        assert resp.status_code == 403

    async def test_delete(self, client, admin_headers, alice_headers):
        await _add(client, admin_headers)
        resp = await client.delete("/api/employees/EMP010", headers=alice_headers)
        assert resp.status_code == 403

        resp = await client.delete("/api/employees/EMP010", headers=admin_headers)
        assert resp.status_code == 204
        resp = await client.get("/api/employees/EMP010", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "EMPLOYEE_NOT_FOUND"


class TestEmployeeDetail:
    async def test_admin_detail_includes_task_stats(self, client, admin_headers):
        await _add(client, admin_headers)
        resp = await client.post(
            "/api/tasks",
            json={
                "title": "Close the books",
                "assigned_to": "EMP010",
                "due_date": "2030-01-01T00:00:00Z",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201

        resp = await client.get("/api/employees/EMP010", headers=admin_headers)
        data = resp.json()
        assert data["employee"]["name"] == "Jordan Lee"
        assert data["tasks"]["total"] == 1

    async def test_employee_detail_without_stats(self, client, admin_headers, alice_headers):
        await _add(client, admin_headers)
        resp = await client.get("/api/employees/EMP010", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.json()["tasks"] is None


class TestDirectoryBackedIdentity:
    async def test_missing_employee_header_filled_from_directory(self, client, admin_headers):
        await _add(client, admin_headers)
        created = await client.post(
            "/api/tasks",
            json={
                "title": "Reconcile invoices",
                "assigned_to": "EMP010",
                "due_date": "2030-01-01T00:00:00Z",
            },
            headers=admin_headers,
        )
        task_id = created.json()["id"]

        # 认证代理只给出 user id，没有员工编号
        jordan = {"X-Principal-Id": "u-jordan"}
        resp = await client.get("/api/tasks", headers=jordan)
        assert [t["id"] for t in resp.json()["tasks"]] == [task_id]

        resp = await client.put(
            f"/api/tasks/{task_id}/progress", json={"progress": 25}, headers=jordan
        )
        assert resp.status_code == 200

    async def test_assignee_name_filled_on_create(self, client, admin_headers):
        await _add(client, admin_headers)
        resp = await client.post(
            "/api/tasks",
            json={
                "title": "Quarterly audit",
                "assigned_to": "EMP010",
                "due_date": "2030-01-01T00:00:00Z",
            },
            headers=admin_headers,
        )
        assert resp.json()["assigned_to_name"] == "Jordan Lee"
