"""Ví dụ: dùng service layer (không qua Flask).

Issues today's tokens for one worker and prints the scan links, using the same
container the web app builds.
"""

import importlib
import sys

from dotenv import load_dotenv

from qr_attendance.config import get_settings_module
from qr_attendance.container import build_container


def main(worker_id: int = 1):
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    worker = container.workers_repo.get_by_id(worker_id)
    if worker is None:
        sys.exit(f"worker {worker_id} not found")

    for result in container.token_issuer.issue_for_worker(worker):
        token = result.token
        print(
            token.action.value,
            token.valid_from.strftime("%H:%M"),
            "-",
            token.valid_until.strftime("%H:%M"),
            container.delivery_service.scan_url(token),
            "(new)" if result.created else "(existing)",
        )


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
