"""Typer CLI for formguard commands."""

import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from formguard.config import GovernanceConfig, PolicyMode, load_config
from formguard.errors import ConfigError
from formguard.form.session import GovernanceSession
from formguard.governance.fields import FieldGovernanceState
from formguard.governance.remediation import remediate_all
from formguard.policy.jurisdiction import Jurisdiction, compute_field_violations
from formguard.policy.rules import Severity
from formguard.risk.breakdown import RiskRole, compute_risk
from formguard.utils.logging import configure_logging, get_logger
from formguard.utils.serialization import dumps, loads

app = typer.Typer(help="formguard CLI - field-level governance checks")
logger = get_logger("cli")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
):
    """Field-level governance checks for form definitions."""
    if verbose:
        configure_logging(logging.DEBUG, stream=sys.stderr)


def load_fields(path: Path) -> List[FieldGovernanceState]:
    """
    Load field governance states from a JSON or YAML list.

    Entries need at least field_id, classification and label; other
    attributes fall back to the registration defaults.
    """
    text = path.read_text()
    if path.suffix in (".yaml", ".yml"):
        data: Any = yaml.safe_load(text) or []
    else:
        data = loads(text)

    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} must contain a list of fields")

    try:
        fields = [FieldGovernanceState.model_validate(item) for item in data]
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid field definition in {path}: {e}") from e

    logger.debug("Loaded %d fields from %s", len(fields), path)
    return fields


@app.command()
def score(
    fields_file: Path = typer.Argument(..., exists=True, help="Path to fields JSON/YAML file"),
    jurisdiction: Jurisdiction = typer.Option(Jurisdiction.US, "--jurisdiction", "-j", help="Jurisdiction"),
    role: RiskRole = typer.Option(RiskRole.VIEWER, "--role", "-r", help="Simulated user role"),
):
    """Compute the multi-factor risk breakdown for a field set."""
    fields = load_fields(fields_file)
    breakdown = compute_risk(fields, jurisdiction, role)
    typer.echo(dumps(breakdown.to_dict(), pretty=True))


@app.command()
def violations(
    fields_file: Path = typer.Argument(..., exists=True, help="Path to fields JSON/YAML file"),
    jurisdiction: Jurisdiction = typer.Option(Jurisdiction.US, "--jurisdiction", "-j", help="Jurisdiction"),
    fail_on_block: bool = typer.Option(False, "--fail-on-block", help="Exit 1 if any BLOCK violation is found"),
):
    """List governance violations per field."""
    fields = load_fields(fields_file)
    result = {f.field_id: [v.to_dict() for v in compute_field_violations(f, jurisdiction)] for f in fields}
    typer.echo(dumps(result, pretty=True))

    blocked = any(v["severity"] == Severity.BLOCK.value for vs in result.values() for v in vs)
    if fail_on_block and blocked:
        raise typer.Exit(code=1)


@app.command()
def remediate(
    fields_file: Path = typer.Argument(..., exists=True, help="Path to fields JSON/YAML file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write remediated fields here"),
):
    """Apply auto-remediation to every field."""
    fields = load_fields(fields_file)
    remediated = remediate_all({f.field_id: f for f in fields})
    text = dumps([state.to_dict() for state in remediated.values()], pretty=True)

    if output:
        output.write_text(text)
        typer.echo(f"Remediated {len(remediated)} fields -> {output}")
    else:
        typer.echo(text)


@app.command()
def report(
    fields_file: Path = typer.Argument(..., exists=True, help="Path to fields JSON/YAML file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Governance config JSON/YAML"),
    policy_mode: Optional[PolicyMode] = typer.Option(None, "--policy-mode", help="Override policy mode"),
):
    """Print a compliance report for a field set."""
    try:
        config = load_config(config_file) if config_file else GovernanceConfig()
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)

    if policy_mode is not None:
        config = config.model_copy(update={"policy_mode": policy_mode})

    session = GovernanceSession.from_fields(load_fields(fields_file), config)
    typer.echo(dumps(session.compliance_report(), pretty=True))


if __name__ == "__main__":
    app()
