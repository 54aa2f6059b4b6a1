"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import time

from .actuator import AlertActuator
from .classifier import NotificationClassifier
from .config import Config, load_config, parse_voice, save_config
from .contacts import ContactStore
from .device import InMemoryDevice, LoggingTorch, LoggingVibrator
from .devices import list_output_devices
from .errors import RingGuardError
from .event_io import load_events
from .listener import NotificationListener
from .logging_utils import RecentLogBuffer, read_log_tail, setup_logging
from .models import AlertVoice
from .override import DeviceStateOverride
from .storage import default_paths, resolve_log_dir

logger = logging.getLogger("ringguard")

VOICE_CHOICES = [v.value for v in AlertVoice]


def _load(config_path: str) -> Config:
    if os.path.exists(config_path):
        return load_config(config_path)
    return Config()


def _build_actuator(config: Config) -> AlertActuator:
    return AlertActuator(
        config.alert, vibrator=LoggingVibrator(), torch=LoggingTorch()
    )


def _build_listener(config: Config, store: ContactStore) -> NotificationListener:
    classifier = NotificationClassifier(
        monitored_sources=config.classifier.monitored_sources,
        extra_call_phrases=config.classifier.extra_call_phrases,
    )
    device = InMemoryDevice()
    return NotificationListener(
        classifier=classifier,
        contacts=store.list_trusted_contacts,
        monitoring_enabled=store.is_monitoring_enabled,
        override=DeviceStateOverride(policy=device, audio=device),
        actuator=_build_actuator(config),
    )


def _wait_for_alert(actuator: AlertActuator) -> None:
    try:
        while actuator.is_playing:
            time.sleep(0.2)
    except KeyboardInterrupt:
        print("Stopping alert.")
    finally:
        actuator.stop()


def main() -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Config file (default: ~/.ringguard).")
    common.add_argument("--verbose", action="store_true", help="Debug logging.")

    parser = argparse.ArgumentParser(prog="ringguard")
    sub = parser.add_subparsers(dest="command")

    devices_cmd = sub.add_parser("devices", parents=[common])
    devices_cmd.add_argument("--match", help="Filter device names by substring.")
    devices_cmd.add_argument(
        "--detail", action="store_true", help="Show detailed device info."
    )

    sub.add_parser("contacts", parents=[common])
    add_cmd = sub.add_parser("add-contact", parents=[common])
    add_cmd.add_argument("name", help="Display name as it appears in call notifications.")
    add_cmd.add_argument("number", help="Phone number.")
    remove_cmd = sub.add_parser("remove-contact", parents=[common])
    remove_cmd.add_argument("name")
    remove_cmd.add_argument("number")

    monitor_cmd = sub.add_parser("monitor", parents=[common])
    monitor_cmd.add_argument("state", choices=["on", "off"])

    test_cmd = sub.add_parser("test", parents=[common])
    test_cmd.add_argument("--voice", choices=VOICE_CHOICES, help="Override voice.")
    test_cmd.add_argument("--duration", type=float, help="Seconds before auto-stop.")

    preview_cmd = sub.add_parser("preview", parents=[common])
    preview_cmd.add_argument("--voice", choices=VOICE_CHOICES, help="Voice to preview.")
    preview_cmd.add_argument("--duration", type=float, help="Seconds.")

    classify_cmd = sub.add_parser("classify", parents=[common])
    classify_cmd.add_argument("events", help="JSON or JSON-lines notification events.")

    replay_cmd = sub.add_parser("replay", parents=[common])
    replay_cmd.add_argument("events", help="JSON or JSON-lines notification events.")
    replay_cmd.add_argument(
        "--interval", type=float, default=0.5, help="Seconds between events."
    )

    status_cmd = sub.add_parser("status", parents=[common])
    status_cmd.add_argument("--lines", type=int, default=20, help="Log lines to show.")
    sub.add_parser("config", parents=[common])

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return 0

    paths = default_paths(
        os.path.dirname(os.path.abspath(args.config)) if args.config else None
    )
    config_path = args.config or paths["config"]
    config = _load(config_path)
    log_dir = resolve_log_dir(paths["root"], config.log_dir)
    buffer = RecentLogBuffer()
    _, log_path = setup_logging(
        log_dir, level=logging.DEBUG if args.verbose else logging.INFO, buffer=buffer
    )
    store = ContactStore(config_path)

    try:
        return _run(args, config, config_path, store, log_path, buffer)
    except RingGuardError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        print(f"Error: {exc.message}")
        return 1


def _run(
    args,
    config: Config,
    config_path: str,
    store: ContactStore,
    log_path: str,
    buffer: RecentLogBuffer,
) -> int:
    if args.command == "devices":
        devices = list_output_devices()
        if args.match:
            devices = [
                d for d in devices if args.match.lower() in d.get("name", "").lower()
            ]
        for device in devices:
            line = (
                f"[{device.get('index', '?')}] {device.get('name', 'Unknown')}"
                f" (outputs: {device.get('max_output_channels', 0)})"
            )
            if args.detail:
                extra = []
                if "default_samplerate" in device:
                    extra.append(f"rate={device.get('default_samplerate')}")
                if "hostapi" in device:
                    extra.append(f"hostapi={device.get('hostapi')}")
                if extra:
                    line = f"{line} [{', '.join(extra)}]"
            print(line)
        return 0

    if args.command == "contacts":
        contacts = store.list_trusted_contacts()
        if not contacts:
            print("No trusted contacts. Add one with: ringguard add-contact NAME NUMBER")
        for contact in contacts:
            print(f"{contact.display_name}\t{contact.phone_number}")
        return 0

    if args.command == "add-contact":
        try:
            added = store.add_contact(args.name, args.number)
        except ValueError as exc:
            print(f"Error: {exc}")
            return 1
        print("Added." if added else "Already trusted.")
        return 0

    if args.command == "remove-contact":
        removed = store.remove_contact(args.name, args.number)
        print("Removed." if removed else "Not found.")
        return 0 if removed else 1

    if args.command == "monitor":
        store.set_monitoring_enabled(args.state == "on")
        print(f"Monitoring {'ON' if args.state == 'on' else 'OFF'}")
        return 0

    if args.command == "test":
        device = InMemoryDevice()
        result = DeviceStateOverride(policy=device, audio=device).force_audible()
        for step in result.steps:
            print(f"{step.name}: {step.status}")
        actuator = _build_actuator(config)
        voice = parse_voice(args.voice) if args.voice else None
        if not actuator.trigger(voice=voice, duration=args.duration):
            print("Alert voice could not start; see log.")
        print("Alerting... press Ctrl+C to stop.")
        _wait_for_alert(actuator)
        return 0

    if args.command == "preview":
        actuator = _build_actuator(config)
        voice = parse_voice(args.voice) if args.voice else None
        started = actuator.trigger(voice=voice, duration=args.duration, is_preview=True)
        if not started:
            print("Alert voice could not start; see log.")
            return 1
        _wait_for_alert(actuator)
        return 0

    if args.command == "classify":
        classifier = NotificationClassifier(
            monitored_sources=config.classifier.monitored_sources,
            extra_call_phrases=config.classifier.extra_call_phrases,
        )
        contacts = store.list_trusted_contacts()
        for event in load_events(args.events):
            verdict = classifier.classify(event, contacts)
            matched = verdict.matched_contact.display_name if verdict.matched_contact else "-"
            print(
                f"{event.source_identifier}\tcall={verdict.is_incoming_call}"
                f"\tmatch={matched}\tsignals={','.join(verdict.signals) or '-'}"
            )
        return 0

    if args.command == "replay":
        listener = _build_listener(config, store)
        listener.on_listener_connected()
        try:
            for event in load_events(args.events):
                job = listener.on_notification_posted(event)
                if job is not None:
                    job.result()
                    _wait_for_alert(listener.actuator)
                time.sleep(args.interval)
        finally:
            listener.on_listener_disconnected()
            listener.shutdown()
        print("Session log:")
        for line in buffer.lines():
            print(f"  {line}")
        return 0

    if args.command == "status":
        contacts = store.list_trusted_contacts()
        print(f"Config: {config_path}")
        print(f"Monitoring: {'ON' if store.is_monitoring_enabled() else 'OFF'}")
        print(f"Trusted contacts: {len(contacts)}")
        print(f"Voice: {config.alert.voice} @ {config.alert.volume_percent}%")
        print(f"Auto-stop: {config.alert.auto_stop_seconds:g}s")
        print(f"Log: {log_path}")
        for line in read_log_tail(log_path, args.lines):
            print(f"  {line}")
        return 0

    if args.command == "config":
        if not os.path.exists(config_path):
            save_config(config_path, config)
            print(f"Wrote default config: {config_path}")
        else:
            print(f"Config: {config_path}")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
