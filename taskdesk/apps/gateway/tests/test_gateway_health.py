"""健康检查测试

测试内容：
1. GET /health 返回 200 + ok
2. GET /ready 正常时返回 200 + checks 结构
3. GET /ready SQLite 不可用时返回 503
"""

from httpx import ASGITransport, AsyncClient


class TestHealthCheck:
    async def test_health_returns_200(self, client: AsyncClient):
        """GET /health 永远返回 200"""
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_ready_returns_200(self, client: AsyncClient):
        """GET /ready 正常时返回 200 + checks 结构"""
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        checks = data["checks"]
        assert checks["sqlite"] == "ok"
        assert isinstance(checks["disk_space_mb"], int)
        assert checks["tasks_loaded"] == 0

    async def test_ready_counts_loaded_tasks(self, client: AsyncClient, admin_headers):
        await client.post(
            "/api/tasks",
            json={
                "title": "Count me",
                "assigned_to": "EMP001",
                "due_date": "2030-01-01T00:00:00+00:00",
            },
            headers=admin_headers,
        )
        resp = await client.get("/ready")
        assert resp.json()["checks"]["tasks_loaded"] == 1

    async def test_ready_sqlite_failure(self, app):
        """GET /ready SQLite 不可用时返回 503，不暴露异常细节"""
        await app.state.store_group.conn.close()

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            resp = await ac.get("/ready")
            assert resp.status_code == 503
            data = resp.json()
            assert data["status"] == "not_ready"
            assert data["checks"]["sqlite"] == "unavailable"
