class TestStatusEndpoint:
    async def test_full_report(self, app_client):
        response = await app_client.get("/api/status")
        assert response.status_code == 200
        data = response.json()

        assert data["hardware"]["gpu_vendor"] == "unknown"
        assert data["hardware"]["system_memory_mb"] == 32000
        assert data["utilization"]["memory_total_mb"] == 32000
        assert data["utilization"]["gpu_percent"] == -1.0
        assert data["inference"]["reachable"] is True
        assert data["inference"]["models"][0]["name"] == "llama3.1:8b"
        assert data["web_interfaces"] == []

    async def test_hardware(self, app_client):
        response = await app_client.get("/api/system/hardware")
        assert response.status_code == 200
        data = response.json()
        assert data["has_container_runtime"] is False
        assert data["kernel_version"] == "unknown"

    async def test_metrics(self, app_client):
        response = await app_client.get("/api/system/metrics")
        assert response.status_code == 200
        data = response.json()
        assert data["memory_used_mb"] == 17000
        assert 0 <= data["cpu_percent"] <= 100
