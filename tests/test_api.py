import pytest


def as_user(user) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_requests_need_a_known_user(client, users):
    assert (await client.get("/leads")).status_code == 401
    assert (await client.get("/leads", headers={"X-User-Id": "999"})).status_code == 401
    assert (await client.get("/leads", headers=as_user(users["sdr1"]))).status_code == 200


@pytest.mark.asyncio
async def test_create_pick_and_call_a_lead(client, users):
    sdr1 = as_user(users["sdr1"])

    r = await client.post(
        "/leads",
        json={"company_name": "Padaria Central", "phone_raw": "(11) 98888-0000", "city": "São Paulo"},
        headers=sdr1,
    )
    assert r.status_code == 201, r.text
    lead = r.json()
    assert lead["phone_norm"] == "11988880000"
    assert lead["status"] == "NOVO"

    r = await client.get("/leads/next", headers=sdr1)
    assert r.status_code == 200
    assert r.json()["id"] == lead["id"]

    r = await client.post(
        "/calls",
        json={"lead_id": lead["id"], "result": "CONTATO_REALIZADO", "duration": 90},
        headers=sdr1,
    )
    assert r.status_code == 201, r.text
    assert r.json()["user_id"] == users["sdr1"].id

    r = await client.get(f"/leads/{lead['id']}", headers=sdr1)
    body = r.json()
    assert body["status"] == "CONTATO_REALIZADO"
    assert body["attempts"] == 1
    assert body["assigned_to_id"] == users["sdr1"].id

    # the lead now belongs to sdr1; sdr2 has nothing to call
    r = await client.get("/leads/next", headers=as_user(users["sdr2"]))
    assert r.status_code == 200
    assert r.json() is None

    calls = (await client.get(f"/leads/{lead['id']}/calls", headers=sdr1)).json()
    assert [c["duration"] for c in calls] == [90]


@pytest.mark.asyncio
async def test_settings_are_written_by_head_only(client, users):
    body = {"value": "true"}
    r = await client.put("/settings/MODO_RECESSO", json=body, headers=as_user(users["sdr1"]))
    assert r.status_code == 403

    r = await client.put("/settings/MODO_RECESSO", json=body, headers=as_user(users["head"]))
    assert r.status_code == 200
    assert r.json()["updated_by"] == users["head"].id

    r = await client.get("/settings/MODO_RECESSO", headers=as_user(users["sdr1"]))
    assert r.json()["value"] == "true"
    r = await client.get("/settings/NOT_SET", headers=as_user(users["sdr1"]))
    assert r.status_code == 200
    assert r.json() is None


@pytest.mark.asyncio
async def test_domain_errors_map_to_http_statuses(client, users):
    h = as_user(users["sdr1"])

    assert (await client.get("/leads/999", headers=h)).status_code == 404

    lead = (await client.post("/leads", json={"company_name": "Loja", "phone_raw": "11977770000"}, headers=h)).json()

    r = await client.patch(f"/leads/{lead['id']}", json={"status": "PERDIDO"}, headers=h)
    assert r.status_code == 400

    r = await client.patch(
        f"/leads/{lead['id']}", json={"status": "PERDIDO", "loss_reason": "SEM_INTERESSE"}, headers=h
    )
    assert r.status_code == 200
    assert r.json()["loss_reason"] == "SEM_INTERESSE"

    r = await client.patch(f"/leads/{lead['id']}", json={"status": "NOVO"}, headers=h)
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_prohibited_terms_block_call_notes(client, users):
    head, sdr1 = as_user(users["head"]), as_user(users["sdr1"])

    r = await client.post("/rules", json={"type": "PROIBIDA", "term": "Garantido"}, headers=sdr1)
    assert r.status_code == 403
    r = await client.post("/rules", json={"type": "PROIBIDA", "term": "Garantido"}, headers=head)
    assert r.status_code == 201

    r = await client.post("/check-prohibited", json={"text": "resultado garantido!"}, headers=sdr1)
    assert r.json() == {"has_prohibited": True, "term": "garantido"}

    lead = (await client.post("/leads", json={"company_name": "Loja", "phone_raw": "11977770000"}, headers=sdr1)).json()
    r = await client.post(
        "/calls",
        json={"lead_id": lead["id"], "result": "CONTATO_REALIZADO", "notes": "venda garantido"},
        headers=sdr1,
    )
    assert r.status_code == 400
    assert r.json()["prohibited_term"] == "garantido"
    assert (await client.get(f"/leads/{lead['id']}/calls", headers=sdr1)).json() == []


@pytest.mark.asyncio
async def test_import_then_resolve_duplicate(client, users):
    h = as_user(users["sdr1"])
    rows = [
        {"companyName": "Oficina Dois Irmãos", "phone": "(11) 98888-1002"},
        {"razao_social": "Oficina 2 Irmaos", "telefone": "11988881002"},
        {"companyName": "Sem Telefone"},
    ]
    r = await client.post("/leads/import", json=rows, headers=h)
    assert r.status_code == 200, r.text
    assert r.json() == {"imported": 2, "duplicates": 1, "errors": 1}

    (dup,) = (await client.get("/leads/duplicates", headers=h)).json()
    assert dup["status"] == "POSSIVEL_DUPLICADO"

    r = await client.post(f"/leads/{dup['id']}/resolve-duplicate", json={"action": "merge"}, headers=h)
    assert r.status_code == 400

    r = await client.post(f"/leads/{dup['id']}/resolve-duplicate", json={"action": "keep"}, headers=h)
    assert r.status_code == 200
    assert r.json()["status"] == "NOVO"
    assert (await client.get("/leads/duplicates", headers=h)).json() == []


@pytest.mark.asyncio
async def test_public_proposal_link(client, users):
    h = as_user(users["sdr1"])
    lead = (await client.post("/leads", json={"company_name": "Loja", "phone_raw": "11977770000"}, headers=h)).json()

    p = (await client.post("/proposals", json={"lead_id": lead["id"], "plan": "PRO", "value": 900}, headers=h)).json()
    assert p["status"] == "DRAFT"

    r = await client.post(f"/proposals/{p['id']}/send", headers=h)
    assert r.json()["status"] == "SENT"
    assert (await client.post(f"/proposals/{p['id']}/send", headers=h)).status_code == 409

    # no user header on the public route
    r = await client.get(f"/proposals/public/{p['public_token']}")
    assert r.status_code == 200
    assert r.json()["plan"] == "PRO"
    assert "public_token" not in r.json()
    assert (await client.get("/proposals/public/unknown")).status_code == 404


@pytest.mark.asyncio
async def test_auto_accept_job_is_head_only(client, users):
    r = await client.post("/jobs/auto-accept-proposals", headers=as_user(users["sdr1"]))
    assert r.status_code == 403

    r = await client.post("/jobs/auto-accept-proposals", headers=as_user(users["head"]))
    assert r.status_code == 200
    assert r.json()["accepted"] == 0

    runs = (await client.get("/jobs/runs", headers=as_user(users["head"]))).json()
    assert runs[0]["id"] == r.json()["job_run_id"]


@pytest.mark.asyncio
async def test_deal_closes_after_auto_accept_sold_the_lead(client, users):
    h, head = as_user(users["sdr1"]), as_user(users["head"])
    lead = (await client.post("/leads", json={"company_name": "Pet Shop", "phone_raw": "11977770001"}, headers=h)).json()
    deal = (
        await client.post("/deals", json={"lead_id": lead["id"], "package_sold": "BUSINESS", "value": 1800}, headers=h)
    ).json()
    p = (await client.post("/proposals", json={"lead_id": lead["id"], "plan": "BUSINESS"}, headers=h)).json()
    await client.post(f"/proposals/{p['id']}/send", headers=h)

    r = await client.post("/jobs/auto-accept-proposals", params={"days": 0}, headers=head)
    assert r.json()["accepted"] == 1
    assert (await client.get(f"/leads/{lead['id']}", headers=h)).json()["status"] == "VENDIDO"

    r = await client.patch(f"/deals/{deal['id']}", json={"status": "FECHADO"}, headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "FECHADO"
