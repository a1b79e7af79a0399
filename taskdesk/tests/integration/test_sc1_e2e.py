"""SC-1 端到端集成测试

管理员分配任务 -> 员工看到任务 -> 员工推进进度直到完成 -> 完成后不回退。
"""

from datetime import UTC, datetime, timedelta

from httpx import AsyncClient

ADMIN = {
    "X-Principal-Id": "u-admin",
    "X-Principal-Email": "admin@example.com",
    "X-Principal-Name": "Admin",
    "X-Principal-Role": "admin",
}

EMPLOYEE = {
    "X-Principal-Id": "0c4b1a52-7c1f-4e4e-9a57-5b1a9f2d6f10",
    "X-Employee-Id": "EMP001",
    "X-Principal-Email": "jordan@example.com",
    "X-Principal-Name": "Jordan",
}

OTHER_EMPLOYEE = {
    "X-Principal-Id": "u-other",
    "X-Employee-Id": "EMP002",
    "X-Principal-Email": "sam@example.com",
}


class TestSC1EndToEnd:
    async def test_assignment_lifecycle(self, client: AsyncClient):
        tomorrow = datetime.now(UTC) + timedelta(days=1)

        # 管理员创建任务
        resp = await client.post(
            "/api/tasks",
            json={
                "title": "Quarterly inventory count",
                "assigned_to": "EMP001",
                "assigned_to_name": "Jordan",
                "due_date": tomorrow.isoformat(),
                "progress": 0,
            },
            headers=ADMIN,
        )
        assert resp.status_code == 201
        task_id = resp.json()["id"]

        # 员工可以看到任务
        resp = await client.get("/api/tasks", headers=EMPLOYEE)
        assert [t["id"] for t in resp.json()["tasks"]] == [task_id]

        # 其他员工看不到
        resp = await client.get("/api/tasks", headers=OTHER_EMPLOYEE)
        assert resp.json()["tasks"] == []

        # 进度 50 -> in_progress
        resp = await client.put(
            f"/api/tasks/{task_id}/progress", json={"progress": 50}, headers=EMPLOYEE
        )
        assert resp.json()["status"] == "in_progress"

        # 进度 100 -> completed
        before = datetime.now(UTC)
        resp = await client.put(
            f"/api/tasks/{task_id}/progress", json={"progress": 100}, headers=EMPLOYEE
        )
        data = resp.json()
        assert data["status"] == "completed"
        completed_at = datetime.fromisoformat(data["completed_at"])
        assert completed_at >= before

        # 完成后再调整进度：progress 更新，状态保持 completed
        resp = await client.put(
            f"/api/tasks/{task_id}/progress", json={"progress": 60}, headers=EMPLOYEE
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["progress"] == 60
        assert data["status"] == "completed"
        assert datetime.fromisoformat(data["completed_at"]) == completed_at

    async def test_employee_cannot_delete(self, client: AsyncClient):
        resp = await client.post(
            "/api/tasks",
            json={
                "title": "Archive old tickets",
                "assigned_to": "EMP001",
                "due_date": "2030-01-01T00:00:00+00:00",
            },
            headers=ADMIN,
        )
        task_id = resp.json()["id"]

        resp = await client.delete(f"/api/tasks/{task_id}", headers=EMPLOYEE)
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "PERMISSION_DENIED"

        resp = await client.get("/api/tasks", headers=ADMIN)
        assert [t["id"] for t in resp.json()["tasks"]] == [task_id]

    async def test_comment_thread(self, client: AsyncClient):
        resp = await client.post(
            "/api/tasks",
            json={
                "title": "Draft hiring plan",
                "assigned_to": "jordan@example.com",
                "due_date": "2030-01-01T00:00:00+00:00",
            },
            headers=ADMIN,
        )
        task_id = resp.json()["id"]

        await client.post(
            f"/api/tasks/{task_id}/comments", json={"text": "Started"}, headers=EMPLOYEE
        )
        await client.post(
            f"/api/tasks/{task_id}/comments", json={"text": "Thanks"}, headers=ADMIN
        )

        resp = await client.get(f"/api/tasks/{task_id}", headers=EMPLOYEE)
        assert [c["text"] for c in resp.json()["comments"]] == ["Started", "Thanks"]
