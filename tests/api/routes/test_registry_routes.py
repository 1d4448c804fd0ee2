import pytest
@pytest.mark.asyncio
async def test_patient_crud(client):
    created = await client.post("/api/v1/patients/", json={
        "name": "Carlos Mendes",
        "cpf": "529.982.247-25",
        "comorbidities": "diabetes, hipertensão",
    })

    assert created.status_code == 201
    patient = created.json()
    assert patient["cpf"] == "52998224725"
    assert patient["comorbidities"] == ["diabetes", "hipertensão"]

    updated = await client.put(f"/api/v1/patients/{patient['id']}", json={"contact": "(31) 3333-4444"})
    assert updated.status_code == 200
    assert updated.json()["contact"] == "(31) 3333-4444"
    assert updated.json()["name"] == "Carlos Mendes"

    assert (await client.delete(f"/api/v1/patients/{patient['id']}")).status_code == 204
    missing = await client.get(f"/api/v1/patients/{patient['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Paciente não encontrado"}


@pytest.mark.asyncio
async def test_search_hospitals(client):
    for name in ("Hospital São Lucas", "Hospital Albert"):
        assert (await client.post("/api/v1/hospitals/", json={"name": name})).status_code == 201

    response = await client.get("/api/v1/hospitals/", params={"search": "lucas"})

    assert [h["name"] for h in response.json()] == ["Hospital São Lucas"]

