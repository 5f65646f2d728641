import os
import time
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

import app as app_module
from eligibility import EligibilityProcessor
from eligibility.config import ARTIFACT_FILE, NOT_FOUND, RELOOKUP_OUTPUT_FILE

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def client(tmp_path, monkeypatch):
    runs = tmp_path / "runs"
    runs.mkdir()
    monkeypatch.setattr(app_module, "TMP_ROOT", str(runs))
    monkeypatch.setattr(app_module, "WORK_DIR", str(tmp_path / "empty"))
    monkeypatch.setattr(app_module, "API_KEY", None)
    return TestClient(app_module.app)


def upload(path):
    return (path.name, path.read_bytes(), XLSX)


def full_uploads(workdir):
    return {
        "relatorio": upload(workdir / "relatorio.xlsx"),
        "bitrix": upload(workdir / "baixada_do_bitrix.xlsx"),
        "time": upload(workdir / "time_novembro.xlsx"),
    }


def test_index_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'name="relatorio"' in resp.text


def test_run_with_uploads_and_download(client, workdir):
    resp = client.post("/run", files=full_uploads(workdir))
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["mode"] == "full"
    assert body["output_file"] == ARTIFACT_FILE
    assert body["stats"] == {"rows": 3, "cnpj_misses": 1, "team_misses": 1}
    assert body["filter_counts"][-1]["rows"] == 3

    download = client.get(body["download_url"])
    assert download.status_code == 200
    ws = load_workbook(BytesIO(download.content))["Sheet1"]
    rows = list(ws.iter_rows(values_only=True))
    assert rows[1][2:5] == ("Fase2", "Maria", "North")
    assert rows[3][2:5] == (NOT_FOUND, NOT_FOUND, NOT_FOUND)

    logs = client.get("/logs").json()["logs"]
    assert logs == body["logs"]


def test_run_relookup_upload(client, workdir):
    assert EligibilityProcessor().run(workdir).success
    resp = client.post("/run", files={"elegiveis": upload(workdir / ARTIFACT_FILE)})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["mode"] == "relookup"
    assert body["output_file"] == RELOOKUP_OUTPUT_FILE
    assert body["download_url"].endswith(f"/{RELOOKUP_OUTPUT_FILE}")


def test_run_from_work_dir(client, workdir, monkeypatch):
    monkeypatch.setattr(app_module, "WORK_DIR", str(workdir))
    resp = client.post("/run")
    assert resp.status_code == 200, resp.text
    assert resp.json()["mode"] == "full"
    # the working directory is left untouched
    assert not (workdir / ARTIFACT_FILE).exists()


def test_run_failure_returns_500(client, workdir):
    resp = client.post("/run", data={"mode": "full"}, files={"relatorio": upload(workdir / "relatorio.xlsx")})
    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Pipeline falhou"
    assert "baixada_do_bitrix.xlsx" in body["error"]
    assert body["download_url"] is None


def test_run_without_any_input_fails(client):
    resp = client.post("/run")
    assert resp.status_code == 500
    assert "relatorio.xlsx" in resp.json()["error"]


def test_invalid_mode(client):
    resp = client.post("/run", data={"mode": "bogus"})
    assert resp.status_code == 400


def test_invalid_url(client):
    resp = client.post("/run", data={"relatorio_url": "file:///etc/passwd"})
    assert resp.status_code == 400


def test_api_key_required(client, workdir, monkeypatch):
    monkeypatch.setattr(app_module, "API_KEY", "secret")
    assert client.post("/run").status_code == 401
    assert client.get("/download/run_1_ab/elegiveis_auto.xlsx").status_code == 401

    resp = client.post("/run", files=full_uploads(workdir), headers={"X-API-Key": "secret"})
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "url",
    [
        "/download/run_1_ab/relatorio.xlsx",
        "/download/other/elegiveis_auto.xlsx",
        "/download/run_1_ab/elegiveis_auto.xlsx",
    ],
)
def test_download_not_found(client, url):
    assert client.get(url).status_code == 404


def run_dirs(client_root):
    return [p for p in client_root.iterdir() if p.is_dir()]


def test_failed_run_leaves_nothing_behind(client, workdir):
    runs = workdir / "runs"
    resp = client.post("/run", data={"mode": "full"}, files={"relatorio": upload(workdir / "relatorio.xlsx")})
    assert resp.status_code == 500
    assert run_dirs(runs) == []


def test_successful_run_keeps_only_the_output(client, workdir):
    runs = workdir / "runs"
    resp = client.post("/run", files=full_uploads(workdir))
    assert resp.status_code == 200
    (run_dir,) = run_dirs(runs)
    assert [p.name for p in run_dir.iterdir()] == [ARTIFACT_FILE]


def test_expired_runs_are_pruned(client, workdir):
    runs = workdir / "runs"
    stale = runs / "run_1_abc"
    stale.mkdir()
    (stale / ARTIFACT_FILE).write_bytes(b"old")
    old = time.time() - app_module.RUN_TTL_SECONDS - 60
    os.utime(stale, (old, old))
    other = runs / "keep_me"
    other.mkdir()
    os.utime(other, (old, old))

    client.post("/run", files=full_uploads(workdir))

    assert not stale.exists()
    assert other.exists()


def test_upload_suffixes():
    assert app_module._suffix("relatorio.xls") == ".xls"
    assert app_module._suffix("relatorio.XLSX") == ".xlsx"
    assert app_module._suffix("relatorio.pdf") == ".xlsx"
