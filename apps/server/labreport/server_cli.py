from __future__ import annotations

import os

from dotenv import load_dotenv


def main() -> None:
    load_dotenv()
    os.environ.setdefault("LABREPORT_DISABLE_AUTO_APP", "1")
    from labreport.app import main as app_main

    app_main()
