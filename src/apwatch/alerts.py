# src/apwatch/alerts.py
import json, http.client, pathlib
from email.message import EmailMessage
import smtplib

from loguru import logger

from apwatch.common import open_connection, request_path
from apwatch.errors import DeliveryError
from apwatch.report import Report


def post_json(url: str, payload: dict, timeout: float = 10):
    body = json.dumps(payload)
    try:
        conn = open_connection(url, timeout=timeout)
        try:
            conn.request("POST", request_path(url), body=body, headers={"Content-Type": "application/json"})
            resp = conn.getresponse()
            resp.read()
        finally:
            conn.close()
    except (OSError, http.client.HTTPException, ValueError) as e:
        raise DeliveryError(f"POST to {url} failed: {e}") from e
    if resp.status >= 300:
        raise DeliveryError(f"POST to {url} failed: {resp.status}")


def write_report(path, payload: dict):
    p = pathlib.Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise DeliveryError(f"Cannot write report to '{p}': {e}") from e


def send_discord(webhook_url: str, text: str):
    post_json(webhook_url, {"content": text}, timeout=5)


def send_email(smtp_host: str, smtp_port: int, username: str, password: str,
               from_addr: str, to_addrs: list[str], subject: str, body: str):
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = from_addr
    msg["To"] = ", ".join(to_addrs)
    msg.set_content(body)
    with smtplib.SMTP(smtp_host, smtp_port, timeout=10) as s:
        s.starttls()
        if username:
            s.login(username, password)
        s.send_message(msg)


def summarize(report: Report) -> str:
    lines = [f"[apwatch] {len(report.high)} high severity finding(s) out of {report.total} APs"]
    lines += [f"- {o.title}" for o in report.high]
    return "\n".join(lines)


def notify(report: Report, cfg_alerts: dict) -> int:
    """Send high severity findings to Discord/e-mail. Best-effort; returns number sent."""
    if not report.high or not cfg_alerts:
        return 0
    msg = summarize(report)
    sent = 0
    if cfg_alerts.get("discord_webhook"):
        try:
            send_discord(cfg_alerts["discord_webhook"], msg)
            sent += 1
        except DeliveryError as e:
            logger.error(f"notify failed: {e}")
    em = cfg_alerts.get("email") or {}
    if em.get("to"):
        try:
            send_email(
                em.get("smtp_host", "smtp.gmail.com"),
                int(em.get("smtp_port", 587)),
                em.get("username", ""),
                em.get("password", ""),
                em.get("from", "apwatch <alerts@example.com>"),
                em.get("to", []),
                subject=f"[apwatch] {len(report.high)} rogue AP finding(s)",
                body=msg,
            )
            sent += 1
        except (OSError, smtplib.SMTPException) as e:
            logger.error(f"notify failed: {e}")
    return sent
