"""Example: Several copies of one in-memory sound, one of them looping."""

import sys
from pathlib import Path

from wavy import AudioSystem

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python multi_play_demo.py <path_to_sound_file>")
        sys.exit(1)

    path = sys.argv[1]
    if not Path(path).exists():
        print(f"Error: File not found: {path}")
        sys.exit(1)

    system = AudioSystem()

    try:
        system.start()
        print("Audio system started")

        base = system.load_memory(path)
        print(f"Loaded: {path} ({base.total_time:.2f}s)")

        # Copies share the decoded bytes but play independently
        echo = base.copy()
        echo.set_volume(0.4)
        intro = base.clip(0.0, 0.25)

        base.loop_async(-1)
        echo.seek_to_percent(0.5)
        echo.play_async()
        intro.loop_async(3)
        print("Looping the sound, an echo from the middle and the first quarter 3 times")

        print("\nControls:")
        print("- Press 'p' + Enter to pause/resume everything")
        print("- Press 's' + Enter to stop looping")
        print("- Press 'q' + Enter to quit")

        paused = False
        try:
            while True:
                cmd = input().strip().lower()

                if cmd == "q":
                    break
                elif cmd == "p":
                    if paused:
                        system.resume_all()
                        print("Resumed")
                    else:
                        system.pause_all()
                        print("Paused")
                    paused = not paused
                elif cmd == "s":
                    base.pause()
                    print(f"Stopped looping, {base.remaining_time():.2f}s left in the current pass")

        except KeyboardInterrupt:
            print("\nInterrupted")

    finally:
        system.shutdown()
        print("Audio system shut down")
