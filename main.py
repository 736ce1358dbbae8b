from __future__ import annotations

from boot_orchestrator.runtime.lifecycle import main


if __name__ == "__main__":
    raise SystemExit(main())
