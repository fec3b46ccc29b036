"""Example: Play a WAV file, jumping around in it."""

import sys
import time
from pathlib import Path

from wavy import AudioSystem

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python play_wav.py <path_to_wav_file>")
        sys.exit(1)

    wav_path = sys.argv[1]
    if not Path(wav_path).exists():
        print(f"Error: File not found: {wav_path}")
        sys.exit(1)

    with AudioSystem() as system:
        sound = system.load_streaming(wav_path)
        print(f"Loaded: {sound.total_time:.2f} seconds")

        print("Playing the second half...")
        sound.seek_to_percent(0.5)
        sound.play_async()
        time.sleep(min(1.0, sound.remaining_time()))

        print("Back to the start at half volume")
        sound.set_volume(0.5)
        sound.seek_to_time(0)
        try:
            sound.wait()
            print("Playback completed")
        except KeyboardInterrupt:
            print("\nInterrupted, stopping...")
            sound.pause()
