import argparse
import os
import sys
import time

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import sounddevice as sd

from ringguard.config import AlertSettings
from ringguard.models import AlertVoice
from ringguard.voices import build_voice


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--device", help="Output device name substring.")
    parser.add_argument("--seconds", type=float, default=3.0, help="Seconds per voice.")
    parser.add_argument("--volume", type=int, default=60, help="Volume percent.")
    parser.add_argument("--ringtone", help="Custom ringtone file.")
    args = parser.parse_args()

    info = sd.query_devices(args.device, "output") if args.device else sd.query_devices(
        None, "output"
    )
    print(f"Output device: {info.get('name', '')}")
    print(f"Default sample rate: {info.get('default_samplerate', '')}")

    settings = AlertSettings(
        volume_percent=args.volume,
        output_device=args.device,
        ringtone_source="custom" if args.ringtone else "phone",
        ringtone_path=args.ringtone,
    )
    for kind in AlertVoice:
        voice = build_voice(kind, settings)
        print(f"Playing {kind.value} for {args.seconds:g}s...")
        started = time.time()
        voice.start()
        try:
            time.sleep(args.seconds)
        finally:
            voice.stop()
        print(f"  stopped after {time.time() - started:.2f}s")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
