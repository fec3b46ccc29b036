"""Example: Play a sound file, streamed from disk or decoded into memory."""

import sys
from pathlib import Path

from wavy import AudioSystem, SoundLoadError

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python play_file.py <path_to_sound_file> [--memory]")
        sys.exit(1)

    path = sys.argv[1]
    in_memory = "--memory" in sys.argv[2:]
    if not Path(path).exists():
        print(f"Error: File not found: {path}")
        sys.exit(1)

    system = AudioSystem()

    try:
        system.start()

        print(f"Loading {path}...")
        try:
            sound = system.load_memory(path) if in_memory else system.load_streaming(path)
        except SoundLoadError as e:
            print(f"Error: {e}")
            sys.exit(1)
        print(f"Loaded: {sound.total_time:.2f} seconds ({sound.mode.value})")

        print("Playing...")
        try:
            sound.play_sync()
            print("Playback completed")
        except KeyboardInterrupt:
            print("\nInterrupted, stopping...")
            sound.pause()

    finally:
        system.shutdown()
        print("Audio system shut down")
