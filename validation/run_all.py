import os
import sys
import argparse
import subprocess
from pathlib import Path
import logging

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

THREAD_VARS = ["NUMBA_NUM_THREADS", "OMP_NUM_THREADS", "OPENBLAS_NUM_THREADS"]


def thread_env(n: int | None) -> dict:
    """Copy of the environment with the thread count of the numerical backends fixed to n."""
    env = os.environ.copy()
    if n is not None:
        env.update({var: str(int(n)) for var in THREAD_VARS})
    return env


def collect_scripts(root: Path, suite: str | None = None) -> list[Path]:
    """
    Every first-level folder of root is a suite, every test*.py inside it a validation script.
    """
    if suite is not None:
        suites = [root / suite]
    else:
        suites = [
            sub
            for sub in sorted(root.iterdir())
            if sub.is_dir() and not sub.name.startswith((".", "__"))
        ]
    scripts = []
    for sub in suites:
        if not sub.is_dir():
            raise FileNotFoundError(f"Suite not found: {sub}")
        scripts.extend(sorted(sub.glob("test*.py")))
    return scripts


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the validation scripts.")
    parser.add_argument("--threads", type=int, default=None, help="Threads for NUMBA/OMP/OPENBLAS")
    parser.add_argument("--suite", type=str, default=None, help="Run only one suite (e.g. vmc)")
    args = parser.parse_args()
    root = Path(__file__).resolve().parent
    try:
        scripts = collect_scripts(root, args.suite)
    except FileNotFoundError as err:
        logger.error(err)
        return 2
    if not scripts:
        logger.info("No validation scripts found.")
        return 2
    # The child processes read the thread variables before importing numba
    env = thread_env(args.threads)
    failed = []
    for script in scripts:
        name = str(script.relative_to(root))
        logger.info(f"=== {name} ===")
        if subprocess.run([sys.executable, str(script)], env=env).returncode != 0:
            failed.append(name)
    logger.info("====================================================")
    if failed:
        logger.info(f"FAILED: {len(failed)}/{len(scripts)} scripts")
        for name in failed:
            logger.info(f"  {name}")
        return 1
    logger.info(f"ALL PASSED: {len(scripts)} scripts")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
