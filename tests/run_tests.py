#!/usr/bin/env python3
"""
End-to-end test runner for the fastxdr compiler.

Compiles every tests/fixtures/test_*.x with the command-line compiler and
verifies the exit code expected from the filename:
- test_*.x: expect 0 (module generated)
- test_err_*.x: expect 2 (compilation failed)

Successful compilations are also imported, so a fixture that produces
invalid Python fails too.

Usage:
    python tests/run_tests.py
    python tests/run_tests.py --verbose
    python tests/run_tests.py --filter union
"""

import argparse
import importlib.util
import json
import os
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm


def get_expected_exit_code(test_file: Path) -> int:
    """Determine expected exit code based on filename convention."""
    if test_file.name.startswith("test_err_"):
        return 2
    return 0


def import_generated(path: Path) -> str:
    """Import a generated module. Returns an error description, or '' on success."""
    spec = importlib.util.spec_from_file_location(f"generated_{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        return f"IMPORT ERROR: {type(e).__name__}: {e}"
    return ""


def run_single_test(test_file: Path, out_dir: Path, verbose: bool = False) -> tuple[str, bool, int, int, str]:
    """Run a single test file and return results."""
    test_name = test_file.name
    expected_exit_code = get_expected_exit_code(test_file)

    try:
        output_path = out_dir / f"{test_file.stem}.py"
        result = subprocess.run(
            [sys.executable, "-m", "fastxdr", str(test_file), "-o", str(output_path)],
            capture_output=True,
            text=True,
            timeout=30,
        )

        actual_exit_code = result.returncode
        passed = actual_exit_code == expected_exit_code

        output = ""
        if result.stdout:
            output += f"STDOUT:\n{result.stdout}\n"
        if result.stderr:
            output += f"STDERR:\n{result.stderr}\n"

        if passed and actual_exit_code == 0:
            problem = import_generated(output_path)
            if problem:
                passed = False
                output += problem + "\n"

        return test_name, passed, expected_exit_code, actual_exit_code, output

    except subprocess.TimeoutExpired:
        return test_name, False, expected_exit_code, -1, "TEST TIMEOUT"
    except OSError as e:
        return test_name, False, expected_exit_code, -1, f"TEST ERROR: {e}"


def main():
    parser = argparse.ArgumentParser(description="Run fastxdr compiler tests")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show detailed output for each test")
    parser.add_argument("-j", "--jobs", type=int, default=4,
                        help="Number of parallel test jobs (default: 4)")
    parser.add_argument("--filter", type=str,
                        help="Only run tests matching this pattern")
    parser.add_argument("--json", action="store_true",
                        help="Output results in JSON format")

    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    fixtures_dir = project_root / "tests" / "fixtures"
    out_dir = project_root / "tests" / "bin"
    out_dir.mkdir(exist_ok=True)

    # Run from the project root so `-m fastxdr` finds the package
    os.chdir(project_root)

    test_files = sorted(fixtures_dir.rglob("test_*.x"))
    if args.filter:
        test_files = [f for f in test_files if args.filter in str(f.relative_to(fixtures_dir))]

    if not test_files:
        if not args.json:
            print("No test files found!")
        return 1

    if not args.json:
        print(f"Running {len(test_files)} tests with {args.jobs} parallel jobs...")
        print()

    start_time = time.time()

    results = []
    show_progress = not args.json and not args.verbose
    with ThreadPoolExecutor(max_workers=args.jobs) as executor:
        futures = {executor.submit(run_single_test, f, out_dir, args.verbose): f for f in test_files}
        if show_progress:
            pbar = tqdm(total=len(test_files), desc="Running tests", unit="test",
                        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]")
        for future in as_completed(futures):
            results.append(future.result())
            if show_progress:
                pbar.update(1)
        if show_progress:
            pbar.close()

    end_time = time.time()

    passed_tests = []
    failed_tests = []

    for test_name, passed, expected, actual, output in sorted(results):
        if passed:
            passed_tests.append(test_name)
            if args.verbose and not args.json:
                print(f"✓ {test_name} (expected: {expected}, actual: {actual})")
        else:
            failed_tests.append((test_name, expected, actual, output))
            if not args.json:
                print(f"✗ {test_name} (expected: {expected}, actual: {actual})")
                if args.verbose and output:
                    print(f"  Output: {output}")

    if args.json:
        json_output = {
            "total_tests": len(results),
            "passed": len(passed_tests),
            "failed": len(failed_tests),
            "duration_seconds": round(end_time - start_time, 2),
            "failed_tests": [
                {
                    "name": test_name,
                    "expected_exit_code": expected,
                    "actual_exit_code": actual,
                }
                for test_name, expected, actual, output in failed_tests
            ],
        }
        print(json.dumps(json_output, indent=2))
        return 1 if failed_tests else 0

    print()
    print(f"Test Results ({end_time - start_time:.2f}s):")
    print(f"  Passed: {len(passed_tests)}")
    print(f"  Failed: {len(failed_tests)}")
    print(f"  Total:  {len(results)}")

    if failed_tests:
        print()
        print("Failed tests:")
        for test_name, expected, actual, output in failed_tests:
            print(f"  {test_name}: expected {expected}, got {actual}")
        return 1

    print()
    print("All tests passed! ✓")
    return 0


if __name__ == "__main__":
    sys.exit(main())
