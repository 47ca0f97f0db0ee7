import os
import sys
import time
import click
import yaml


def _settings(config: str | None) -> dict:
    if not config:
        return {}
    from apwatch.common import load_config
    return load_config(config)


LOG_LEVELS = {0: "ERROR", 1: "INFO", 2: "DEBUG", 3: "TRACE"}


def _start_logging(cfg: dict, verbose: bool, log_level: int | None, log_file: str | None):
    from apwatch.common import setup_logging, DEFAULT_LOG_FILE
    log_cfg = cfg.get("logging", {}) or {}
    if log_level is not None:
        level = LOG_LEVELS[log_level]
    elif verbose:
        level = "DEBUG"
    else:
        level = str(log_cfg.get("level", "INFO"))
    log_file = log_file or log_cfg.get("file")
    # log to ./logs when that directory exists
    if not log_file and os.path.isdir("logs"):
        log_file = DEFAULT_LOG_FILE
    return setup_logging(level, log_file)


@click.group(help="apwatch: detect rogue Wi-Fi access points from iw scan output")
def cli():
    pass


@cli.command()
@click.option("--config", default=None, help="Path to apwatch.yaml")
@click.option("-i", "--registry", "registry_path", default=None, help="INI file with [authorized]/[known] APs")
@click.option("--registry-url", default=None, help="URL serving the registry INI text")
@click.option("-s", "--scan", "scan_file", default=None, help="Text file with a dump of `iw <iface> scan`")
@click.option("--iface", default=None, help="Wireless interface to scan when no --scan file is given")
@click.option("-o", "--output", "output_path", default=None, help="Write the JSON report to this file")
@click.option("--output-url", default=None, help="POST the JSON report to this URL")
@click.option("-m", "--mode", type=click.Choice(["normal", "strict"]), default=None,
              help="normal: report high severity only; strict: report everything")
@click.option("--legacy-trailing-block", is_flag=True, help="Drop the BSS block still open at end of input")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.option("-l", "--log-level", type=click.IntRange(0, 3), default=None,
              help="0 errors only, 1 important, 2 debug, 3 everything")
@click.option("--log-file", default=None, help="Also log to this file")
def scan(config, registry_path, registry_url, scan_file, iface, output_path, output_url, mode,
         legacy_trailing_block, verbose, log_level, log_file):
    """Classify the APs of one scan against the registry."""
    from apwatch.alerts import notify, post_json, write_report
    from apwatch.capture.source import read_scan_file, run_scan_command, scan_command
    from apwatch.engine import evaluate_text
    from apwatch.errors import DeliveryError, SourceUnavailable
    from apwatch.registry import Registry, fetch_registry, load_registry
    from apwatch.report import MODES

    started = time.monotonic()
    try:
        cfg = _settings(config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        click.secho(f"[scan] cannot load config: {e}", fg="red")
        sys.exit(1)
    logger = _start_logging(cfg, verbose, log_level, log_file)

    scan_cfg = cfg.get("scan", {}) or {}
    reg_cfg = cfg.get("registry", {}) or {}
    rep_cfg = cfg.get("report", {}) or {}
    registry_path = registry_path or reg_cfg.get("path")
    registry_url = registry_url or reg_cfg.get("url")
    output_path = output_path or rep_cfg.get("path")
    output_url = output_url or rep_cfg.get("url")
    mode = mode or rep_cfg.get("mode", "strict")
    if mode not in MODES:
        click.secho(f"[scan] unknown report mode: {mode}", fg="red")
        sys.exit(1)
    flush_trailing = not legacy_trailing_block and bool(scan_cfg.get("flush_trailing", True))

    try:
        if registry_path:
            registry, stats = load_registry(registry_path)
        elif registry_url:
            registry, stats = fetch_registry(registry_url)
        else:
            logger.warning("no registry given: every AP will be reported as new")
            registry, stats = Registry(), None
        if stats and stats.malformed:
            click.secho(f"[scan] {len(stats.malformed)} malformed registry line(s) ignored", fg="yellow")

        if scan_file:
            text = read_scan_file(scan_file)
        else:
            cmd = scan_command(scan_cfg.get("command"), iface)
            text = run_scan_command(cmd, timeout=float(scan_cfg.get("timeout_sec", 30)))
    except SourceUnavailable as e:
        click.secho(f"[scan] {e}", fg="red")
        sys.exit(1)

    report = evaluate_text(text, registry, flush_trailing=flush_trailing)
    payload = report.to_dict(mode)

    failed = False
    for sink, target, send in (("file", output_path, write_report), ("url", output_url, post_json)):
        if not target:
            continue
        try:
            send(target, payload)
            logger.info(f"report delivered to {sink} {target}")
        except DeliveryError as e:
            logger.error(str(e))
            failed = True
    notify(report, cfg.get("alerts", {}) or {})

    color = "red" if report.high else ("yellow" if report.medium else "green")
    click.secho(
        f"[scan] {report.total} APs: {report.authorized} authorized, {report.known} known, "
        f"{report.new} new | high={len(report.high)} medium={len(report.medium)} "
        f"low={len(report.low)} info={len(report.info)}",
        fg=color,
    )
    if not output_path and not output_url:
        for sev, items in payload["findings"].items():
            for item in items:
                click.echo(f"{sev.upper():<6} {item['title']}")
    logger.debug(f"done in {time.monotonic() - started:.1f} sec")
    if failed:
        sys.exit(2)


@cli.command(name="check-registry")
@click.argument("path")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def check_registry(path: str, verbose: bool):
    """Load a registry file and report what it contains."""
    from apwatch.common import setup_logging
    from apwatch.errors import SourceUnavailable
    from apwatch.registry import load_registry

    setup_logging("DEBUG" if verbose else "WARNING")
    try:
        registry, stats = load_registry(path)
    except SourceUnavailable as e:
        click.secho(f"[registry] {e}", fg="red")
        sys.exit(1)
    click.secho(
        f"[registry] {stats.lines} lines, {len(registry.authorized)} authorized, "
        f"{len(registry.known)} known, {len(registry.levels)} SSIDs",
        fg="green",
    )
    for bssid in stats.conflicts:
        click.secho(f"[registry] {bssid} is both authorized and known", fg="yellow")
    if stats.unknown_section:
        click.secho(f"[registry] {stats.unknown_section} entries under unknown sections ignored", fg="yellow")
    for err in stats.malformed:
        click.secho(f"[registry] {err}", fg="red")
    if stats.malformed:
        sys.exit(1)


if __name__ == "__main__":
    cli()
