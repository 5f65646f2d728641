"""Main eligibility pipeline: load, filter, index, enrich, write."""

import logging
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import polars as pl

from .config.source_mappings import (
    ARTIFACT_FILE,
    CRM_FILE,
    MAIN_SHEET,
    RELATIONSHIP_SHEET,
    RELOOKUP_OUTPUT_FILE,
    REPORT_FILE,
    RESULT_SHEET,
    REVENUE_FILE,
    REVENUE_SHEET,
    ROSTER_FILE,
    SUPERVISORS_SHEET,
)
from .context import RunContext
from .diagnostics import log_fill_rates, log_lookup_misses
from .enrichment import EnrichmentStats, enrich
from .errors import MissingInputError, PipelineError
from .filters import apply_filters, resolve_filter_columns
from .lookups import build_indexes
from .outputs.naming import rename_for_output
from .outputs.writer import write_workbook
from .readers import read_grid, read_sheets
from .transforms import (
    CrmLoader,
    ReportLoader,
    RevenueLoader,
    RosterLoader,
    load_artifact,
)

logger = logging.getLogger(__name__)

FULL_MODE = "full"
RELOOKUP_MODE = "relookup"
AUTO_MODE = "auto"


@dataclass
class SourceFiles:
    """Input files of a full run; revenue is optional."""

    report: Optional[Path] = None
    crm: Optional[Path] = None
    roster: Optional[Path] = None
    revenue: Optional[Path] = None

    @classmethod
    def from_workdir(cls, workdir) -> "SourceFiles":
        workdir = Path(workdir)
        revenue = workdir / REVENUE_FILE
        return cls(
            report=workdir / REPORT_FILE,
            crm=workdir / CRM_FILE,
            roster=workdir / ROSTER_FILE,
            revenue=revenue if revenue.exists() else None,
        )

    def missing(self) -> List[str]:
        required = {
            REPORT_FILE: self.report,
            CRM_FILE: self.crm,
            ROSTER_FILE: self.roster,
        }
        return [
            str(path) if path is not None else name
            for name, path in required.items()
            if path is None or not Path(path).exists()
        ]


@dataclass
class PipelineResult:
    success: bool
    mode: Optional[str]
    logs: List[str]
    output_path: Optional[Path] = None
    filter_counts: List[Tuple[str, int]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "mode": self.mode,
            "logs": list(self.logs),
            "output_file": self.output_path.name if self.output_path else None,
            "filter_counts": [{"stage": label, "rows": n} for label, n in self.filter_counts],
            "stats": dict(self.stats),
            "error": self.error,
        }


class EligibilityProcessor:
    """Runs one pipeline per call; nothing is shared between runs."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    def run(
        self,
        workdir,
        mode: str = AUTO_MODE,
        output_path=None,
    ) -> PipelineResult:
        """Run against the fixed file names of a working directory.

        In auto mode the full pipeline runs when its three required files
        exist; otherwise a previously produced artifact is re-looked-up.
        """
        workdir = Path(workdir)
        sources = SourceFiles.from_workdir(workdir)
        artifact = workdir / ARTIFACT_FILE

        if mode == AUTO_MODE:
            if not sources.missing():
                mode = FULL_MODE
            elif artifact.exists():
                mode = RELOOKUP_MODE
            else:
                ctx = RunContext(AUTO_MODE)
                return self._failure(ctx, None, MissingInputError(sources.missing()))

        if mode == FULL_MODE:
            return self.run_full(sources, output_path or workdir / ARTIFACT_FILE)
        if mode == RELOOKUP_MODE:
            return self.run_relookup(artifact, output_path or workdir / RELOOKUP_OUTPUT_FILE)
        raise ValueError(f"Unknown mode: {mode}")

    def run_full(self, sources: SourceFiles, output_path) -> PipelineResult:
        ctx = RunContext(FULL_MODE)
        return self._guarded(ctx, FULL_MODE, lambda: self._full(ctx, sources, Path(output_path)))

    def run_relookup(self, artifact_path, output_path) -> PipelineResult:
        ctx = RunContext(RELOOKUP_MODE)
        return self._guarded(
            ctx, RELOOKUP_MODE, lambda: self._relookup(ctx, Path(artifact_path), Path(output_path))
        )

    def _guarded(self, ctx: RunContext, mode: str, step: Callable[[], PipelineResult]) -> PipelineResult:
        try:
            return step()
        except PipelineError as e:
            return self._failure(ctx, mode, e)
        except Exception as e:
            ctx.error(f"Erro no pipeline: {e}")
            ctx.error(traceback.format_exc())
            logger.error(f"Pipeline {mode} failed: {e}", exc_info=True)
            return PipelineResult(success=False, mode=mode, logs=ctx.logs, error=str(e))

    def _failure(self, ctx: RunContext, mode: Optional[str], error: PipelineError) -> PipelineResult:
        ctx.error(f"{error.message}. Abortando.")
        return PipelineResult(success=False, mode=mode, logs=ctx.logs, error=error.message)

    def _full(self, ctx: RunContext, sources: SourceFiles, output_path: Path) -> PipelineResult:
        ctx.info("Iniciando pipeline completo...")
        missing = sources.missing()
        if missing:
            raise MissingInputError(missing)
        if sources.revenue is not None and not Path(sources.revenue).exists():
            raise MissingInputError([str(sources.revenue)])
        with_revenue = sources.revenue is not None

        ctx.info(f"Lendo {Path(sources.report).name}...")
        report_loader = ReportLoader(ctx, with_revenue=with_revenue)
        report = report_loader.load(read_grid(sources.report))
        ctx.info(f"Lendo {Path(sources.crm).name} (Bitrix)...")
        crm = CrmLoader(ctx).load(read_grid(sources.crm))
        ctx.info(f"Lendo {Path(sources.roster).name} (time)...")
        roster = RosterLoader(ctx).load(read_grid(sources.roster))
        revenue = None
        if with_revenue:
            ctx.info(f"Lendo {Path(sources.revenue).name} (faturamento)...")
            revenue = RevenueLoader(ctx).load(read_grid(sources.revenue))

        columns = resolve_filter_columns(report.columns, ctx)
        outcome = apply_filters(report, columns, ctx)

        if outcome.survivors == 0:
            ctx.info("Nenhuma linha restou após os filtros. Gerando arquivo com cabeçalhos apenas.")
            main = outcome.frame
            derived = report_loader.placeholders
            stats = EnrichmentStats()
            if with_revenue:
                stats.revenue_misses = 0
        else:
            indexes = build_indexes(crm, roster, revenue, ctx)
            enriched = enrich(outcome.frame, indexes, ctx, targets=report_loader.placeholders)
            main, stats, derived = enriched.frame, enriched.stats, enriched.columns
            log_lookup_misses(stats)
            log_fill_rates(main, derived.values())

        sheets: Dict[str, pl.DataFrame] = {
            MAIN_SHEET: rename_for_output(main, derived),
            RELATIONSHIP_SHEET: crm,
            SUPERVISORS_SHEET: roster,
        }
        if revenue is not None:
            sheets[REVENUE_SHEET] = revenue

        ctx.info(f"Salvando arquivo {output_path.name}...")
        write_workbook(output_path, sheets)
        ctx.info(f"Arquivo {output_path.name} salvo com sucesso. Pipeline completo finalizado.")
        return PipelineResult(
            success=True,
            mode=FULL_MODE,
            logs=ctx.logs,
            output_path=output_path,
            filter_counts=outcome.counts,
            stats=stats.as_dict(),
        )

    def _relookup(self, ctx: RunContext, artifact_path: Path, output_path: Path) -> PipelineResult:
        ctx.info(f"Iniciando PROCV-only (ler {artifact_path.name} -> gerar {output_path.name})...")
        if not artifact_path.exists():
            raise MissingInputError([str(artifact_path)])

        artifact = load_artifact(read_sheets(artifact_path), ctx)
        indexes = build_indexes(artifact.crm, artifact.roster, artifact.revenue, ctx)
        enriched = enrich(artifact.report, indexes, ctx, targets=artifact.derived)
        log_lookup_misses(enriched.stats)
        log_fill_rates(enriched.frame, enriched.columns.values())

        write_workbook(output_path, {RESULT_SHEET: rename_for_output(enriched.frame, enriched.columns)})
        ctx.info(f"Arquivo {output_path.name} criado com sucesso.")
        return PipelineResult(
            success=True,
            mode=RELOOKUP_MODE,
            logs=ctx.logs,
            output_path=output_path,
            stats=enriched.stats.as_dict(),
        )
