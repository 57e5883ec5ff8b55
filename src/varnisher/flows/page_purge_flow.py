"""
Page purge flow.

Wraps `PagePurger` in a Prefect flow: validates the run configuration with
pydantic, runs the purge as a single task (no retries, a purge is attempted at
most once per URL) and logs a summary through the Prefect run logger.
"""

from __future__ import annotations

from prefect import flow, get_run_logger, task

from varnisher.core.config import PurgerConfig
from varnisher.core.models import PurgeReport
from varnisher.core.purger import PagePurger


@task(name="purge_page", retries=0)
def purge_page_task(config: PurgerConfig, url: str) -> PurgeReport:
    logger = get_run_logger()
    purger = PagePurger(config, logger=logger)
    return purger.run(url)


@flow(name="Page Purge", log_prints=True)
def page_purge_flow(config_dict: dict, url: str) -> PurgeReport:
    """Purge `url` and its embedded resources from the proxy cache.

    config_dict: must conform to `PurgerConfig`.
    """
    logger = get_run_logger()
    try:
        config = PurgerConfig(**config_dict)
        logger.info(
            "Config valid, proxy at %s:%s", config.proxy_hostname, config.proxy_port
        )
    except Exception as e:
        logger.error("Invalid config: %s", e)
        raise

    report = purge_page_task(config, url)

    if report.fetch_failure is not None:
        logger.warning(
            "Purged %s only; its resources could not be scanned.", report.target
        )
    logger.info(
        "%s: %d resources found, %d purgeable, %d purged, %d failed.",
        report.target,
        report.discovered,
        report.purgeable,
        report.succeeded,
        report.failed,
    )
    return report


if __name__ == "__main__":
    payload = {
        "proxy_hostname": "localhost",
        "proxy_port": 6081,
        "verbose": True,
        "max_workers": 8,
    }
    page_purge_flow(payload, "http://localhost/index.html")
