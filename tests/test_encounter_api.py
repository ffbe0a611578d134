def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_list_encounters_in_ward_order(client):
    res = client.get("/encounters")
    assert res.status_code == 200

    body = res.json()
    assert [row["patientName"] for row in body] == ["Arvind Sharma", "Neha Sinha", "Rahul Menon", "Sneha Patil"]
    assert body[0]["workflowStatus"] == "admitted"
    assert "pendingOrders" in body[0]


def test_census(client):
    assert client.get("/encounters/census").json() == {
        "admitted": 3,
        "in-care": 1,
        "ready-for-discharge": 0,
        "discharged": 0,
    }


def test_lookup_by_id_and_mrn(client):
    assert client.get("/encounters/ipd-3").json()["mrn"] == "MRN-245994"
    assert client.get("/encounters/by-mrn/MRN-245994").json()["patientId"] == "ipd-3"
    assert client.get("/encounters/ipd-404").status_code == 404
    assert client.get("/encounters/by-mrn/MRN-0").status_code == 404


def test_register_then_readmit_same_mrn(client):
    res = client.post(
        "/encounters/admissions",
        json={"mrn": "MRN-300100", "patientName": "Kavya Nair", "consultant": "Dr. Nisha Rao", "ward": "ICU"},
    )
    assert res.status_code == 201
    created = res.json()
    assert created["workflowStatus"] == "admitted"

    res = client.post("/encounters/admissions", json={"mrn": "MRN-300100", "diagnosis": "Sepsis"})
    assert res.status_code == 200
    again = res.json()
    assert again["patientId"] == created["patientId"]
    assert again["diagnosis"] == "Sepsis"
    assert again["ward"] == "ICU"


def test_register_rejects_blank_mrn(client):
    assert client.post("/encounters/admissions", json={"mrn": " "}).status_code == 422


def test_discharge_flow_over_http(client):
    pid = "ipd-2"

    res = client.post(f"/encounters/{pid}/clinical", json={"pendingOrders": 0, "pendingMedications": 0})
    assert res.status_code == 200
    assert res.json()["workflowStatus"] == "ready-for-discharge"
    assert res.json()["dischargeReady"] is True

    res = client.post(f"/encounters/{pid}/discharge")
    assert res.json()["workflowStatus"] == "discharged"

    res = client.post(f"/encounters/{pid}/clinical", json={"pendingOrders": 3})
    assert res.json()["workflowStatus"] == "discharged"
    assert res.json()["pendingOrders"] == 0

    # discharged patients drop to the bottom of the list
    assert client.get("/encounters").json()[-1]["patientId"] == pid


def test_discharge_checks_and_bed(client):
    res = client.post("/encounters/ipd-4/discharge-checks", json={"billingCleared": True})
    assert res.json()["billingCleared"] is True
    assert res.json()["workflowStatus"] == "admitted"

    res = client.post("/encounters/ipd-4/bed", json={"bed": "M1-09", "ward": "Medical Ward - 1"})
    assert res.json()["bed"] == "M1-09"
    assert res.json()["workflowStatus"] == "in-care"


def test_patch(client):
    res = client.patch("/encounters/ipd-1", json={"pendingOrders": -4, "clinicalStatus": "critical"})
    assert res.status_code == 200
    assert res.json()["pendingOrders"] == 0
    assert res.json()["clinicalStatus"] == "critical"


def test_patch_rejects_identifiers_and_bad_values(client):
    assert client.patch("/encounters/ipd-1", json={"mrn": "X"}).status_code == 422
    assert client.patch("/encounters/ipd-1", json={"clinicalStatus": "fine"}).status_code == 422


def test_writes_to_unknown_patient_are_404(client):
    assert client.patch("/encounters/ipd-404", json={"bed": "X"}).status_code == 404
    assert client.post("/encounters/ipd-404/discharge").status_code == 404
    assert client.post("/encounters/ipd-404/clinical", json={}).status_code == 404


def test_reset(client):
    client.post("/encounters/ipd-1/discharge")
    assert client.post("/encounters/reset").status_code == 204
    assert client.get("/encounters/ipd-1").json()["workflowStatus"] == "in-care"


def test_route_access_check(client):
    res = client.post("/access/route", json={"pathname": "/ipd/discharge", "permissions": ["ipd.*"]})
    assert res.status_code == 200
    body = res.json()
    assert body["allowed"] is True
    assert body["access"] == {"required_permissions": ["ipd.discharge.write"], "source": "nav"}

    res = client.post("/access/route", json={"pathname": "/nowhere", "permissions": []})
    assert res.json() == {"pathname": "/nowhere", "access": None, "allowed": True}


def test_permission_check(client):
    res = client.post("/access/permission", json={"permissions": ["clinical.*"], "required": "clinical.orders.write"})
    assert res.json() == {"required": "clinical.orders.write", "allowed": True}


def test_role_permissions(client):
    assert client.get("/access/roles/SUPER_ADMIN").json() == ["*"]
    assert client.get("/access/roles/JANITOR").status_code == 404


def test_admission_for_new_mrn_under_existing_id_is_created(client):
    res = client.post("/encounters/admissions", json={"patientId": "ipd-1", "mrn": "MRN-777001", "patientName": "Kiran Das"})
    assert res.status_code == 201
    assert client.get("/encounters/by-mrn/MRN-777001").json()["patientId"] == "ipd-1"


def test_readmission_with_null_fields_over_http(client):
    res = client.post("/encounters/admissions", json={"mrn": "MRN-245994", "patientName": None, "ward": None})
    assert res.status_code == 200
    assert res.json()["patientId"] == "ipd-3"
    assert res.json()["patientName"] == "Arvind Sharma"
