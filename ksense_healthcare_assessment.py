import logging

import click

from patient_triage import client
from patient_triage.batch import process_patients

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5


def report_stats(stats):
    click.echo("Processing statistics:")
    click.echo(f"  Total patients: {stats.total}")
    click.echo(f"  Valid age data: {stats.valid_age}")
    click.echo(f"  Valid blood pressure data: {stats.valid_blood_pressure}")
    click.echo(f"  Valid temperature data: {stats.valid_temperature}")
    click.echo(f"  Fully valid patients: {stats.fully_valid}")
    click.echo(f"  Patients with data quality issues: {stats.data_quality_issues}")
    click.echo(f"  Skipped records: {stats.skipped}")


def report_details(result):
    by_id = {a.id: a for a in result.assessments}

    click.echo(f"High-risk patients ({len(result.high_risk_ids)}):")
    for pid in result.high_risk_ids:
        s = by_id[pid].scores
        click.echo(f"  {pid}: total={s.total} (BP:{s.blood_pressure}, Temp:{s.temperature}, Age:{s.age})")

    click.echo(f"Fever patients ({len(result.fever_ids)}):")
    for pid in result.fever_ids:
        click.echo(f"  {pid}: {by_id[pid].patient.temperature.value}°F")

    click.echo(f"Data quality issues ({len(result.data_quality_issue_ids)}):")
    for pid in result.data_quality_issue_ids:
        click.echo(f"  {pid}: {', '.join(by_id[pid].data_quality_issues())}")

    click.echo(f"Sample processed patients (first {SAMPLE_SIZE}):")
    for a in result.assessments[:SAMPLE_SIZE]:
        p = a.patient
        bp = str(p.blood_pressure.value) if p.blood_pressure.valid else "invalid"
        temp = f"{p.temperature.value}°F" if p.temperature.valid else "invalid"
        age = f"{p.age.value}y" if p.age.valid else "invalid"
        click.echo(f"  {a.id}: Risk={a.scores.total} | BP:{bp} | Temp:{temp} | Age:{age}")


@click.command()
@click.option("--api-key", envvar="KSENSE_API_KEY", default="", help="Assessment API key (env: KSENSE_API_KEY).")
@click.option("--base-url", envvar="KSENSE_BASE_URL", default=client.BASE_URL, show_default=True)
@click.option("--page-limit", default=client.PAGE_LIMIT, type=int, show_default=True, help="Patients per page.")
@click.option("--dry-run", is_flag=True, help="Score patients but do not submit.")
@click.option("--details", is_flag=True, help="List every patient in each alert.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def main(api_key, base_url, page_limit, dry_run, details, verbose):
    """Fetch patients, score their risk and submit the three alert lists."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not api_key:
        raise click.UsageError("No API key: pass --api-key or set KSENSE_API_KEY.")

    conn = {"api_key": api_key, "base_url": base_url}

    click.echo("Checking API connectivity...")
    if not client.check_connection(**conn):
        raise click.ClickException("Failed to connect to the assessment API")

    click.echo("Fetching patients...")
    try:
        patients = client.fetch_all_patients(limit=page_limit, **conn)
    except client.AssessmentAPIError as e:
        raise click.ClickException(f"Fetching patients failed: {e}")
    click.echo(f"Got {len(patients)} patients")

    click.echo("Scoring")
    result = process_patients(patients)
    for skipped in result.skipped:
        logger.warning("Skipped record at index %d: %s", skipped.index, skipped.reason)
    report_stats(result.stats)

    payload = result.to_submission()
    counts = {k: len(v) for k, v in payload.items()}
    click.echo(f"Counts: {counts}")
    if details:
        report_details(result)

    if dry_run:
        click.echo("Dry run, not submitting")
        return

    click.echo("Submitting")
    try:
        resp = client.submit_assessment(payload, **conn)
    except client.AssessmentAPIError as e:
        raise click.ClickException(f"Submission failed: {e}")

    click.echo("Server response:")
    resp = resp or {}
    shown = [k for k in ("score", "feedback", "attempts_remaining") if resp.get(k) is not None]
    for key in shown:
        click.echo(f"  {key}: {resp[key]}")
    if not shown:
        click.echo(resp)


if __name__ == "__main__":
    main()
