import logging
import os
import random
import time

import requests

logger = logging.getLogger(__name__)

BASE_URL = os.getenv("KSENSE_BASE_URL", "https://assessment.ksensetech.com/api")
API_KEY = os.getenv("KSENSE_API_KEY", "")
PAGE_LIMIT = int(os.getenv("KSENSE_PAGE_LIMIT", "5"))
MAX_PAGES = int(os.getenv("KSENSE_MAX_PAGES", "20"))

TIMEOUT = 30
MAX_RETRIES = 3
BASE_DELAY = 1.0
PAGE_DELAY = 0.2


class AssessmentAPIError(RuntimeError):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def headers(api_key=None):
    return {
        "x-api-key": api_key or API_KEY,
        "Content-Type": "application/json",
    }


def is_retryable(status_code):
    return status_code == 429 or status_code >= 500


def retry_delay(attempt, response=None):
    # the API tells us how long to wait when it rate limits
    if response is not None and response.status_code == 429:
        retry_after = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            retry_after = body.get("retry_after")
        retry_after = retry_after or response.headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after) + random.random()
            except (TypeError, ValueError):
                pass
    return BASE_DELAY * 2 ** attempt + random.random()


def decode_body(response, operation):
    # 204 and empty bodies are a success with nothing to report
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise AssessmentAPIError(
            f"{operation} returned a non-JSON body", status_code=response.status_code
        ) from e


def request_json(method, path, api_key=None, base_url=None, **kwargs):
    url = f"{base_url or BASE_URL}{path}"
    operation = f"{method} {path}"
    last_error = None

    for attempt in range(MAX_RETRIES + 1):  # try up to 4 times
        response = None
        try:
            response = requests.request(
                method, url, headers=headers(api_key), timeout=TIMEOUT, **kwargs
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            last_error = e
        else:
            if response.ok:
                return decode_body(response, operation)
            last_error = AssessmentAPIError(
                f"{operation} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
            if not is_retryable(response.status_code):
                logger.error("Non-retryable error for %s: HTTP %s", operation, response.status_code)
                raise last_error

        if attempt == MAX_RETRIES:
            break
        delay = retry_delay(attempt, response)
        logger.warning(
            "%s failed (attempt %d/%d), retrying in %.1fs: %s",
            operation, attempt + 1, MAX_RETRIES + 1, delay, last_error,
        )
        time.sleep(delay)

    logger.error("%s failed after %d attempts", operation, MAX_RETRIES + 1)
    if isinstance(last_error, AssessmentAPIError):
        raise last_error
    raise AssessmentAPIError(f"{operation} failed: {last_error}") from last_error


def get_json(path, params=None, **kwargs):
    return request_json("GET", path, params=params, **kwargs)


def post_json(path, body, **kwargs):
    return request_json("POST", path, json=body, **kwargs)


def fetch_patients_page(page=1, limit=PAGE_LIMIT, **kwargs):
    return get_json("/patients", params={"page": page, "limit": limit}, **kwargs)


def fetch_all_patients(limit=PAGE_LIMIT, max_pages=MAX_PAGES, **kwargs):
    """
    Walk /patients until the API reports no next page.

    Patients repeated across pages are dropped (first one wins) so callers get
    one record per patient_id. Records without an id are passed through for the
    batch step to reject.
    """
    patients = []
    seen = set()
    page = 1
    while page <= max_pages:
        data = fetch_patients_page(page, limit, **kwargs) or {}
        rows = data.get("data") or []
        if not rows:
            logger.info("No patients on page %d, stopping", page)
            break

        for row in rows:
            pid = row.get("patient_id") if isinstance(row, dict) else None
            if not isinstance(pid, (str, int)):
                pid = None
            if pid is not None and pid in seen:
                logger.debug("Dropping duplicate patient %s from page %d", pid, page)
                continue
            if pid is not None:
                seen.add(pid)
            patients.append(row)
        logger.info("Fetched page %d: %d patients (total: %d)", page, len(rows), len(patients))

        pagination = data.get("pagination", {}) or {}
        if not pagination.get("hasNext"):
            break
        page += 1
        if page > max_pages:
            logger.warning("Reached page limit (%d), stopping", max_pages)
            break
        time.sleep(PAGE_DELAY)

    return patients


def submit_assessment(payload, **kwargs):
    return post_json("/submit-assessment", payload, **kwargs)


def check_connection(**kwargs):
    try:
        fetch_patients_page(1, 1, **kwargs)
    except AssessmentAPIError as e:
        logger.error("API connection test failed: %s", e)
        return False
    return True

