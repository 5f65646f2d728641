import asyncio
import logging
import os
import re
import shutil
import threading
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import requests
from fastapi import FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from pydantic import BaseModel
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from eligibility import EligibilityProcessor, PipelineResult, SourceFiles
from eligibility.config import (
    ARTIFACT_FILE,
    CRM_FILE,
    RELOOKUP_OUTPUT_FILE,
    REPORT_FILE,
    REVENUE_FILE,
    ROSTER_FILE,
)
from eligibility.processor import AUTO_MODE, FULL_MODE, RELOOKUP_MODE

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title="Eligibility Report Enricher")

TMP_ROOT = os.environ.get("TMP_ROOT", "/tmp/eligibility_runs")
WORK_DIR = os.environ.get("WORK_DIR", os.getcwd())
API_KEY = os.environ.get("PROCESSOR_API_KEY", None)
RUN_TTL_SECONDS = float(os.environ.get("RUN_TTL_SECONDS", 24 * 3600))
os.makedirs(TMP_ROOT, exist_ok=True)

ALLOWED_SUFFIXES = {".xlsx", ".xlsm", ".xls", ".csv", ".txt"}
RUN_ID_PATTERN = re.compile(r"^run_[0-9a-f_]+$")

# Logs of the most recent run, replaced wholesale when a run finishes
_last_run_lock = threading.Lock()
_last_run_logs: List[str] = []

processor = EligibilityProcessor()


class StageCount(BaseModel):
    stage: str
    rows: int


class RunResponse(BaseModel):
    success: bool
    mode: Optional[str] = None
    message: str
    logs: List[str]
    output_file: Optional[str] = None
    filter_counts: List[StageCount] = []
    stats: Dict[str, int] = {}
    error: Optional[str] = None
    download_url: Optional[str] = None


class LogsResponse(BaseModel):
    logs: List[str]


def auth_ok(x_api_key: Optional[str]):
    if API_KEY is None:
        return True
    return x_api_key == API_KEY


def create_robust_session():
    session = requests.Session()
    retry = Retry(total=3, backoff_factor=1, status_forcelist=[429, 500, 502, 503, 504])
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def _suffix(name: Optional[str]) -> str:
    suffix = Path(name or "").suffix.lower()
    return suffix if suffix in ALLOWED_SUFFIXES else ".xlsx"


def download_to_file(url: str, target: Path) -> Path:
    """Stream a remote file to ``target``."""
    session = create_robust_session()
    with session.get(url, stream=True, timeout=60) as resp:
        resp.raise_for_status()
        with open(target, "wb") as f:
            for chunk in resp.iter_content(chunk_size=1 << 16):
                f.write(chunk)
    logger.info(f"Downloaded {url} -> {target}")
    return target


def save_upload(upload: UploadFile, target: Path) -> Path:
    with open(target, "wb") as f:
        shutil.copyfileobj(upload.file, f)
    return target


def stage_inputs(
    run_dir: Path,
    uploads: Dict[str, Optional[UploadFile]],
    urls: Dict[str, Optional[str]],
) -> Dict[str, Path]:
    """Store every provided input in the run directory under its fixed stem."""
    staged: Dict[str, Path] = {}
    for name, upload in uploads.items():
        stem = Path(name).stem
        if upload is not None and upload.filename:
            staged[name] = save_upload(upload, run_dir / f"{stem}{_suffix(upload.filename)}")
        elif urls.get(name):
            url = urls[name].strip()
            if not url.lower().startswith(("http://", "https://")):
                raise HTTPException(status_code=400, detail=f"URL inválida para {name}: {url}")
            staged[name] = download_to_file(url, run_dir / f"{stem}{_suffix(url.split('?')[0])}")
    return staged


def discard_inputs(staged: Dict[str, Path], keep: Path) -> None:
    """Drop the staged inputs of a finished run; only its output stays for download."""
    for path in staged.values():
        if Path(path).resolve() != Path(keep).resolve():
            Path(path).unlink(missing_ok=True)


def prune_old_runs(max_age: float = RUN_TTL_SECONDS) -> None:
    """Remove run directories older than ``max_age`` seconds."""
    root = Path(TMP_ROOT)
    if not root.is_dir():
        return
    cutoff = time.time() - max_age
    for run_dir in root.iterdir():
        if run_dir.is_dir() and RUN_ID_PATTERN.match(run_dir.name) and run_dir.stat().st_mtime < cutoff:
            shutil.rmtree(run_dir, ignore_errors=True)
            logger.info(f"Pruned expired run directory {run_dir}")


def execute(
run_dir: Path, staged: Dict[str, Path], mode: str) -> PipelineResult:
    if not staged:
        # fixed file names in the working directory
        if mode == AUTO_MODE:
            return _auto_in_workdir(run_dir)
        output = run_dir / (RELOOKUP_OUTPUT_FILE if mode == RELOOKUP_MODE else ARTIFACT_FILE)
        return processor.run(WORK_DIR, mode, output_path=output)

    wants_relookup = mode == RELOOKUP_MODE or (
        mode == AUTO_MODE and ARTIFACT_FILE in staged and REPORT_FILE not in staged
    )
    if wants_relookup:
        artifact = staged.get(ARTIFACT_FILE, run_dir / ARTIFACT_FILE)
        return processor.run_relookup(artifact, run_dir / RELOOKUP_OUTPUT_FILE)

    sources = SourceFiles(
        report=staged.get(REPORT_FILE, run_dir / REPORT_FILE),
        crm=staged.get(CRM_FILE, run_dir / CRM_FILE),
        roster=staged.get(ROSTER_FILE, run_dir / ROSTER_FILE),
        revenue=staged.get(REVENUE_FILE),
    )
    return processor.run_full(sources, run_dir / ARTIFACT_FILE)


def _auto_in_workdir(run_dir: Path) -> PipelineResult:
    workdir = Path(WORK_DIR)
    if SourceFiles.from_workdir(workdir).missing():
        return processor.run(workdir, AUTO_MODE, output_path=run_dir / RELOOKUP_OUTPUT_FILE)
    return processor.run(workdir, AUTO_MODE, output_path=run_dir / ARTIFACT_FILE)


FORM_HTML = """
<html>
    <head><meta charset="utf-8"><title>Automação XLSX</title></head>
    <body>
        <h2>Automação XLSX</h2>
        <form method="post" action="/run" enctype="multipart/form-data">
            <p>Relatório: <input type="file" name="relatorio"></p>
            <p>Bitrix: <input type="file" name="bitrix"></p>
            <p>Time: <input type="file" name="time"></p>
            <p>Faturamento (opcional): <input type="file" name="faturamento"></p>
            <p>Ou apenas elegiveis_auto.xlsx (PROCV-only): <input type="file" name="elegiveis"></p>
            <button type="submit">Executar pipeline</button>
        </form>
        <p>GET <code>/logs</code> para ver logs da última execução.</p>
    </body>
</html>
"""


@app.get("/", response_class=HTMLResponse)
def index():
    return FORM_HTML


@app.post("/run")
async def run_pipeline(
    relatorio: Optional[UploadFile] = File(None),
    bitrix: Optional[UploadFile] = File(None),
    time_file: Optional[UploadFile] = File(None, alias="time"),
    faturamento: Optional[UploadFile] = File(None),
    elegiveis: Optional[UploadFile] = File(None),
    relatorio_url: Optional[str] = Form(None),
    bitrix_url: Optional[str] = Form(None),
    time_url: Optional[str] = Form(None),
    faturamento_url: Optional[str] = Form(None),
    elegiveis_url: Optional[str] = Form(None),
    mode: str = Form(AUTO_MODE),
    x_api_key: Optional[str] = Header(None),
):
    global _last_run_logs

    if not auth_ok(x_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if mode not in {AUTO_MODE, FULL_MODE, RELOOKUP_MODE}:
        raise HTTPException(status_code=400, detail=f"Modo inválido: {mode}")

    prune_old_runs(RUN_TTL_SECONDS)

    run_id = f"run_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
    run_dir = Path(TMP_ROOT) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)

    uploads = {
        REPORT_FILE: relatorio,
        CRM_FILE: bitrix,
        ROSTER_FILE: time_file,
        REVENUE_FILE: faturamento,
        ARTIFACT_FILE: elegiveis,
    }
    urls = {
        REPORT_FILE: relatorio_url,
        CRM_FILE: bitrix_url,
        ROSTER_FILE: time_url,
        REVENUE_FILE: faturamento_url,
        ARTIFACT_FILE: elegiveis_url,
    }

    try:
        staged = stage_inputs(run_dir, uploads, urls)
    except HTTPException:
        shutil.rmtree(run_dir, ignore_errors=True)
        raise
    except requests.RequestException as e:
        shutil.rmtree(run_dir, ignore_errors=True)
        logger.error(f"Download failed: {e}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Falha ao baixar arquivo: {e}")

    loop = asyncio.get_running_loop()
    # the pipeline is synchronous and CPU-bound; keep the event loop free
    try:
        result = await loop.run_in_executor(None, execute, run_dir, staged, mode)
    except Exception:
        shutil.rmtree(run_dir, ignore_errors=True)
        raise

    with _last_run_lock:
        _last_run_logs = list(result.logs)

    if result.success and result.output_path is not None:
        discard_inputs(staged, keep=result.output_path)
        body = RunResponse(
            **result.to_dict(),
            message="Pipeline executado",
            download_url=f"/download/{run_id}/{result.output_path.name}",
        )
        return JSONResponse(status_code=200, content=body.model_dump())

    shutil.rmtree(run_dir, ignore_errors=True)
    body = RunResponse(**result.to_dict(), message="Pipeline falhou")
    return JSONResponse(status_code=500, content=body.model_dump())


@app.get("/logs", response_model=LogsResponse)
def last_run_logs():
    with _last_run_lock:
        return LogsResponse(logs=list(_last_run_logs))


@app.get("/download/{run_id}/{filename}")
def download(run_id: str, filename: str, x_api_key: Optional[str] = Header(None)):
    if not auth_ok(x_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not RUN_ID_PATTERN.match(run_id) or filename not in {ARTIFACT_FILE, RELOOKUP_OUTPUT_FILE}:
        raise HTTPException(status_code=404, detail="Not Found")
    path = Path(TMP_ROOT) / run_id / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(
        path,
        filename=filename,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
