"""
Terminal scan client: drives ScanController with a camera and the HTTP classifier.

Usage:
    recyclopedia-scan                          # interactive, OpenCV webcam
    recyclopedia-scan --camera mock --image bottle.jpg --once
    recyclopedia-scan --api-url http://localhost:3001

Keys: s=start  f=flash  c=capture  x=cancel  r=reset  q=quit
"""
import argparse
import sys

from recyclopedia.adapters.classify.http_classifier import HttpClassifier
from recyclopedia.orchestrator import contracts as C
from recyclopedia.orchestrator.state_machine import ScanController
from recyclopedia.services.settings import load_settings
from recyclopedia.services.status_store import StatusStore


def _camera(kind: str, status, image: str | None):
    if kind == "mock":
        from recyclopedia.adapters.camera.mock_camera import MockCamera
        return MockCamera(status, image_path=image, torch=True)
    from recyclopedia.adapters.camera.cv2_camera import CV2Camera
    return CV2Camera(status)


def render(state: C.SessionState):
    if state.phase == C.IDLE:
        print("\nRecyclopedia - scan your trash, know where it goes. [s] start scanning")
    elif state.phase == C.REQUESTING:
        print("Requesting camera...")
    elif state.phase == C.SCANNING:
        flash = ""
        if state.flash_supported:
            flash = f"  [f] flash {'off' if state.flash_engaged else 'on'}"
        print(f"Center an item to scan. [c] capture  [x] cancel{flash}")
    elif state.phase == C.PROCESSING:
        print("Analyzing... our AI is identifying your item.")
    elif state.phase == C.RESULT and state.last_result is not None:
        r = state.last_result
        print(f"\nThis is a... {r.item_name}")
        print(f"Put it in the {r.bin.value} bin. {r.bin.hint}")
        print(f"  {r.reason}")
        for alt in r.alternatives:
            print(f"  - {alt}")
        print("[r] scan another item")
    elif state.phase == C.ERROR:
        print(f"\nOops! {state.last_error}\n[r] try again")


def run_once(ctrl: ScanController) -> int:
    ctrl.start_scan()
    if ctrl.phase == C.SCANNING:
        ctrl.capture_and_classify()
    return 0 if ctrl.phase == C.RESULT else 1


def run_interactive(ctrl: ScanController) -> int:
    actions = {
        "s": ctrl.start_scan,
        "f": ctrl.toggle_flash,
        "c": ctrl.capture_and_classify,
        "x": ctrl.cancel,
        "r": ctrl.reset,
    }
    render(ctrl.state)
    for line in sys.stdin:
        key = line.strip().lower()[:1]
        if key == "q":
            break
        action = actions.get(key)
        if action is None or not action():
            print(f"(nothing to do for {key!r} while {ctrl.phase})")
    ctrl.reset()
    return 0


def main(argv=None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(prog="recyclopedia-scan", description=__doc__.splitlines()[1])
    parser.add_argument("--camera", choices=["cv2", "mock"], default="cv2")
    parser.add_argument("--image", help="still image served by the mock camera")
    parser.add_argument("--api-url", default=settings.api_url)
    parser.add_argument("--once", action="store_true", help="scan once and exit (status 0 on a result)")
    parser.add_argument("--verbose", action="store_true", help="print the log ring on exit")
    args = parser.parse_args(argv)

    status = StatusStore()
    classifier = HttpClassifier(status, base_url=args.api_url)
    ctrl = ScanController(_camera(args.camera, status, args.image), classifier, status, on_change=render)
    try:
        return run_once(ctrl) if args.once else run_interactive(ctrl)
    finally:
        classifier.close()
        if args.verbose:
            print("\n".join(status.snapshot()))


if __name__ == "__main__":
    sys.exit(main())
