"""Run local environment checks for the Stormchaser path planner."""

import platform
import sys
from pathlib import Path


def _ok(flag: bool) -> str:
    return "PASS" if flag else "FAIL"


def _warn(flag: bool) -> str:
    return "PASS" if flag else "WARN"


def _can_write(path: Path) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        probe = path.parent / ".stormchaser_write_test"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
        return True
    except OSError:
        return False


def main() -> int:
    root = Path(__file__).resolve().parent
    print("Stormchaser Doctor")
    print(f"- OS: {platform.system()} {platform.release()}")
    print(f"- Python: {platform.python_version()} ({sys.executable})")

    py_ok = sys.version_info >= (3, 8)
    print(f"[{_ok(py_ok)}] Python >= 3.8")
    if not py_ok:
        return 1

    try:
        import tkinter  # noqa: F401
        tk_ok = True
    except ImportError:
        tk_ok = False
    print(f"[{_ok(tk_ok)}] tkinter available")

    try:
        import pygame  # noqa: F401
        pg_ok = True
    except ImportError:
        pg_ok = False
    print(f"[{_ok(pg_ok)}] pygame available")

    required = [
        root / "main.py",
        root / "planner" / "config.py",
        root / "planner" / "session.py",
    ]
    files_ok = all(p.exists() for p in required)
    print(f"[{_ok(files_ok)}] core files present")
    if not files_ok:
        for p in required:
            if not p.exists():
                print(f"       Missing: {p}")

    default_image = root / "field_images" / "2026.png"
    print(f"[{_warn(default_image.exists())}] default field image present")

    try:
        from planner.config import METERS_PER_INCH, settings_path, load_settings, crop_flat, robot_flat

        settings_file = Path(settings_path())
    except ImportError:
        settings_file = root / "settings.json"
        load_settings = None
    writable = _can_write(settings_file)
    print(f"[{_ok(writable)}] writable settings path available")

    if load_settings is not None and settings_file.exists():
        saved = load_settings(str(settings_file))
        parsed = saved is not None and crop_flat(saved) is not None
        print(f"[{_warn(parsed)}] {settings_file.name} has a usable crop")
        if saved is None:
            print("       Unreadable JSON; defaults will be used and the file rewritten.")
        elif parsed:
            robot = robot_flat(saved)
            print(f"       Robot: {robot['width'] / METERS_PER_INCH:.1f} x {robot['height'] / METERS_PER_INCH:.1f} in, "
                  f"speed {robot['speed']:.2f} m/s")
    else:
        print(f"[PASS] no {settings_file.name} yet; default crop and robot apply")

    spline_ok = False
    try:
        from planner.path_utils import generate_spline, calculate_path_metrics

        pts = generate_spline([(0.0, 0.0), (3.0, 4.0)], 50)
        metrics = calculate_path_metrics(pts, 2, 50)
        spline_ok = pts[0] == (0.0, 0.0) and pts[-1] == (3.0, 4.0) and abs(metrics["total"] - 5.0) < 1e-9
    except ImportError:
        pass
    print(f"[{_ok(spline_ok)}] spline self-check (endpoints and length)")

    all_ok = py_ok and tk_ok and pg_ok and files_ok and writable and spline_ok
    if all_ok:
        print("All checks passed.")
        return 0
    print("One or more checks failed.")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
