from clinic_queue.schemas import PatientCreate

QUEUE_URL = "/api/v1/queue"
DISPLAY_URL = "/api/v1/display/now-serving"


def add(client, headers, **payload):
    payload.setdefault("patient_id", "p1")
    payload.setdefault("doctor", "Dr. Wilson")
    response = client.post(QUEUE_URL, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def by_id(entries):
    return {entry["id"]: entry for entry in entries}


# =========================================================
# Queue management
# =========================================================
class TestQueueRoutes:
    def test_add_and_list(self, client, staff_headers):
        first = add(client, staff_headers, patient_name="Smith, John", type="Emergency")
        second = add(client, staff_headers, patient_name="Lee, Ann")
        assert first["queue_number"] == 1
        assert first["status"] == "Waiting"
        assert first["type"] == "Emergency"
        assert second["queue_number"] == 2

        response = client.get(QUEUE_URL, headers=staff_headers)
        assert response.status_code == 200
        assert [e["queue_number"] for e in response.json()] == [1, 2]

    def test_add_resolves_name_from_directory(self, client, clinic, staff_headers):
        patient = clinic.add_patient(PatientCreate(first_name="Sarah", middle_name="Elizabeth", last_name="Johnson"))
        entry = add(client, staff_headers, patient_id=patient.id)
        assert entry["patient_name"] == "Johnson, Sarah Elizabeth"

    def test_add_unknown_patient_is_accepted(self, client, staff_headers):
        entry = add(client, staff_headers, patient_id="nobody")
        assert entry["patient_name"] == ""

    def test_list_filtered_by_status(self, client, staff_headers):
        first = add(client, staff_headers)
        add(client, staff_headers)
        client.post(f"{QUEUE_URL}/{first['id']}/start", headers=staff_headers)
        response = client.get(QUEUE_URL, params={"status": "In Progress"}, headers=staff_headers)
        assert [e["id"] for e in response.json()] == [first["id"]]

    def test_get_entry_and_not_found(self, client, staff_headers):
        entry = add(client, staff_headers)
        assert client.get(f"{QUEUE_URL}/{entry['id']}", headers=staff_headers).json()["id"] == entry["id"]
        response = client.get(f"{QUEUE_URL}/missing", headers=staff_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Queue entry not found"

    def test_start_then_start_another(self, client, staff_headers):
        x = add(client, staff_headers)
        y = add(client, staff_headers)
        client.post(f"{QUEUE_URL}/{x['id']}/start", headers=staff_headers)
        response = client.post(f"{QUEUE_URL}/{y['id']}/start", headers=staff_headers)
        assert response.status_code == 200
        entries = by_id(response.json())
        assert entries[x["id"]]["status"] == "Waiting"
        assert entries[y["id"]]["status"] == "In Progress"

    def test_complete_and_revert(self, client, staff_headers):
        x = add(client, staff_headers)
        y = add(client, staff_headers)
        client.post(f"{QUEUE_URL}/{x['id']}/start", headers=staff_headers)
        entries = by_id(client.post(f"{QUEUE_URL}/{x['id']}/complete", headers=staff_headers).json())
        assert entries[x["id"]]["status"] == "Completed"
        assert entries[y["id"]]["status"] == "Waiting"

        entries = by_id(client.post(f"{QUEUE_URL}/{x['id']}/revert", headers=staff_headers).json())
        assert entries[x["id"]]["status"] == "Waiting"

    def test_patch_is_unguarded(self, client, staff_headers):
        x = add(client, staff_headers)
        y = add(client, staff_headers)
        for entry in (x, y):
            response = client.patch(f"{QUEUE_URL}/{entry['id']}", json={"status": "In Progress"}, headers=staff_headers)
            assert response.status_code == 200
        statuses = [e["status"] for e in client.get(QUEUE_URL, headers=staff_headers).json()]
        assert statuses == ["In Progress", "In Progress"]

        entries = client.post(f"{QUEUE_URL}/reset-in-progress", headers=staff_headers).json()
        assert [e["status"] for e in entries] == ["Waiting", "Waiting"]

    def test_edit_refreshes_timestamp(self, client, clock, staff_headers):
        entry = add(client, staff_headers)
        assert entry["timestamp"] == "2025-01-01T09:00:00Z"

        clock.value = "2025-01-01T09:30:00Z"
        entries = by_id(client.patch(f"{QUEUE_URL}/{entry['id']}", json={"doctor": "Dr. Brown"},
                                     headers=staff_headers).json())
        assert entries[entry["id"]]["doctor"] == "Dr. Brown"
        assert entries[entry["id"]]["timestamp"] == "2025-01-01T09:30:00Z"

    def test_edit_keeps_explicit_timestamp(self, client, clock, staff_headers):
        entry = add(client, staff_headers)
        clock.value = "2025-01-01T09:30:00Z"
        entries = by_id(client.patch(f"{QUEUE_URL}/{entry['id']}",
                                     json={"doctor": "Dr. Brown", "timestamp": "2025-01-01T08:00:00Z"},
                                     headers=staff_headers).json())
        assert entries[entry["id"]]["timestamp"] == "2025-01-01T08:00:00Z"

    def test_transitions_do_not_touch_timestamp(self, client, clock, staff_headers):
        entry = add(client, staff_headers)
        clock.value = "2025-01-01T10:00:00Z"
        for action in ("start", "complete", "revert"):
            entries = by_id(client.post(f"{QUEUE_URL}/{entry['id']}/{action}", headers=staff_headers).json())
            assert entries[entry["id"]]["timestamp"] == "2025-01-01T09:00:00Z"

    def test_patch_rejects_unknown_status(self, client, staff_headers):
        entry = add(client, staff_headers)
        response = client.patch(f"{QUEUE_URL}/{entry['id']}", json={"status": "Sleeping"}, headers=staff_headers)
        assert response.status_code == 422

    def test_mutations_on_missing_id_are_silent(self, client, staff_headers):
        add(client, staff_headers)
        for action in ("start", "complete", "revert"):
            response = client.post(f"{QUEUE_URL}/missing/{action}", headers=staff_headers)
            assert response.status_code == 200
            assert response.json()[0]["status"] == "Waiting"
        assert client.patch(f"{QUEUE_URL}/missing", json={"doctor": "x"}, headers=staff_headers).status_code == 200
        assert client.delete(f"{QUEUE_URL}/missing", headers=staff_headers).status_code == 204

    def test_delete_keeps_numbering(self, client, staff_headers):
        a = add(client, staff_headers)
        add(client, staff_headers)
        assert client.delete(f"{QUEUE_URL}/{a['id']}", headers=staff_headers).status_code == 204
        assert client.delete(f"{QUEUE_URL}/{a['id']}", headers=staff_headers).status_code == 204
        c = add(client, staff_headers)
        assert c["queue_number"] == 3
        assert [e["queue_number"] for e in client.get(QUEUE_URL, headers=staff_headers).json()] == [2, 3]

    def test_summary(self, client, staff_headers):
        x = add(client, staff_headers)
        y = add(client, staff_headers)
        client.post(f"{QUEUE_URL}/{x['id']}/complete", headers=staff_headers)
        summary = client.get(f"{QUEUE_URL}/summary", headers=staff_headers).json()
        assert summary["total"] == 2
        assert summary["completed"] == 1
        assert summary["waiting"] == 1
        assert summary["now_serving"]["id"] == y["id"]

    def test_export_csv(self, client, staff_headers):
        add(client, staff_headers, patient_name="Smith, John")
        response = client.get(f"{QUEUE_URL}/export", headers=staff_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "queue.csv" in response.headers["content-disposition"]
        assert '"Smith, John"' in response.text

    def test_reset_demo_requires_admin(self, client, staff_headers, admin_headers):
        assert client.post(f"{QUEUE_URL}/reset-demo", headers=staff_headers).status_code == 403
        response = client.post(f"{QUEUE_URL}/reset-demo", headers=admin_headers)
        assert response.status_code == 200
        assert len(response.json()) == 8

    def test_queue_requires_token(self, client):
        assert client.get(QUEUE_URL).status_code == 401
        assert client.post(QUEUE_URL, json={"patient_id": "p1"}).status_code == 401


# =========================================================
# Public display
# =========================================================
class TestDisplay:
    def test_empty_queue(self, client):
        response = client.get(DISPLAY_URL)
        assert response.status_code == 200
        assert response.json()["entry"] is None
        assert response.json()["refresh_seconds"] >= 1
        assert response.json()["total_in_queue"] == 0

    def test_follows_the_queue(self, client, staff_headers):
        x = add(client, staff_headers)
        y = add(client, staff_headers)
        display = client.get(DISPLAY_URL).json()
        assert display["entry"]["id"] == x["id"]
        assert display["total_in_queue"] == 2

        client.post(f"{QUEUE_URL}/{y['id']}/start", headers=staff_headers)
        display = client.get(DISPLAY_URL).json()
        assert display["entry"]["id"] == y["id"]
        assert display["total_in_queue"] == 2

        client.post(f"{QUEUE_URL}/{y['id']}/complete", headers=staff_headers)
        display = client.get(DISPLAY_URL).json()
        assert display["entry"]["id"] == x["id"]
        assert display["total_in_queue"] == 1

        client.post(f"{QUEUE_URL}/{x['id']}/complete", headers=staff_headers)
        display = client.get(DISPLAY_URL).json()
        assert display["entry"] is None
        assert display["total_in_queue"] == 0

    def test_total_ignores_cancelled(self, client, staff_headers):
        x = add(client, staff_headers)
        add(client, staff_headers)
        client.patch(f"{QUEUE_URL}/{x['id']}", json={"status": "Cancelled"}, headers=staff_headers)
        assert client.get(DISPLAY_URL).json()["total_in_queue"] == 1


# =========================================================
# Patients
# =========================================================
class TestPatients:
    def test_create_list_get(self, client, staff_headers):
        response = client.post("/api/v1/patients", json={
            "first_name": "Emily", "middle_name": "Grace", "last_name": "Davis",
            "age": 36, "gender": "Female", "email": "emily.davis@email.com",
        }, headers=staff_headers)
        assert response.status_code == 201
        patient_id = response.json()["id"]

        listing = client.get("/api/v1/patients", headers=staff_headers).json()
        assert [p["id"] for p in listing] == [patient_id]
        assert client.get(f"/api/v1/patients/{patient_id}", headers=staff_headers).json()["last_name"] == "Davis"
        assert client.get("/api/v1/patients/missing", headers=staff_headers).status_code == 404

    def test_validation(self, client, staff_headers):
        bad_payloads = [
            {"first_name": " ", "last_name": "Davis"},
            {"first_name": "Emily", "last_name": "Davis", "age": 151},
            {"first_name": "Emily", "last_name": "Davis", "email": "not-an-email"},
        ]
        for payload in bad_payloads:
            response = client.post("/api/v1/patients", json=payload, headers=staff_headers)
            assert response.status_code == 422
