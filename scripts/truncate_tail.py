import sys
from pathlib import Path

def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: truncate_tail.py <store_file> [bytes]")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    n = int(sys.argv[2]) if len(sys.argv) == 3 else 1
    b = p.read_bytes()
    # Header is 4 bytes and every frame carries a 4-byte length prefix.
    # Cutting into the last frame must leave the header intact.
    if len(b) - n < 4:
        print("File too small to truncate safely.")
        raise SystemExit(2)

    p.write_bytes(b[:-n])
    print(f"Truncated {n} bytes from {p} ({len(b)} -> {len(b) - n})")

if __name__ == "__main__":
    main()
