#!/usr/bin/env python3
"""
audiosphere.py — AudioSphere CLI entry point.

Commands:
  encode    <input.wav> <output.asph>      WAV → ASPH (format mirrors input, clamped)
  decode    <input.asph> <output.wav>      ASPH → WAV
  play      <input.asph> [--loop]          Realtime playback with keyboard controls
  metadata  <file> <title> <artist> [album]  Append a metadata trailer
  info      <file>                         Show format + metadata
  version                                  Print version

Run `python3 audiosphere.py --help` for full usage.
"""
from __future__ import annotations

import argparse
import logging
import sys
import warnings

from asph import __version__, metadata
from asph.api import probe, read_file
from asph.config import PlayerConfig
from asph.diagnostics import AsphError, VersionMismatchWarning
from asph.profiles import VERSION


# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────

def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s %(name)-16s %(levelname)-8s %(message)s',
        stream=sys.stderr,
    )
    # the codec already logs version mismatches; don't print them twice
    warnings.simplefilter('ignore', VersionMismatchWarning)


# ─────────────────────────────────────────────────────────────────────────────
# Sub-command handlers
# ─────────────────────────────────────────────────────────────────────────────

def cmd_encode(args: argparse.Namespace, config: PlayerConfig):
    from asph_bridge import encode_file

    print(f'→ Encoding {args.input} → {args.output}', file=sys.stderr)
    report = encode_file(args.input, args.output, version=args.version)

    print(f'✓ Saved: {args.output}')
    print(f'  ASPH version : {report.version}')
    print(f'  Source       : {report.source}')
    print(f'  Stored as    : {report.format}')
    print(f'  Original     : {report.original_size:,} bytes')
    print(f'  Encoded      : {report.encoded_size:,} bytes')
    print(f'  Ratio        : {report.ratio:.1f}%')


def cmd_decode(args: argparse.Namespace, config: PlayerConfig):
    from asph_bridge import decode_file

    record = decode_file(args.input, args.output)
    print(f'✓ Decoded {args.input} → {args.output}  '
          f'({record.format}, {record.duration_seconds:.1f}s)')


def cmd_play(args: argparse.Namespace, config: PlayerConfig):
    from asph.playback import ProgressRenderer, SoundDeviceSink, play_record

    # decode fully before any output device is touched
    meta = metadata.read(args.input)
    record = read_file(args.input)
    sink = SoundDeviceSink(record.format, device=config.device)

    print(f'Now Playing: {meta.title or args.input}')
    print(f'Artist: {meta.artist or "Unknown"}')
    print(f'Album: {meta.album or "Unknown"}')
    print(f'Format: {record.format}  ({record.duration_seconds:.1f}s)')
    print('Controls: p pause/resume, +/- volume, f/b seek 10s, q stop  (then Enter)')

    progress = ProgressRenderer(sys.stdout)
    result = play_record(
        record,
        sink,
        loop=args.loop or args.mode == 'loop',
        config=config,
        control=sys.stdin,
        render=progress,
        notify=progress.message,
    )
    print(f'\n✓ Playback ended ({result.reason.value}).')


def cmd_metadata(args: argparse.Namespace, config: PlayerConfig):
    size = metadata.write(args.file, args.title, args.artist, args.album)
    print(f'✓ Metadata added to {args.file}  ({size:,} bytes)')


def cmd_info(args: argparse.Namespace, config: PlayerConfig):
    if not probe(args.file):
        print(f'⚠ {args.file} does not start with the ASPH magic', file=sys.stderr)
    meta = metadata.read(args.file)
    if meta.is_empty:
        print('Metadata: (none)')
    else:
        for key, value in meta.as_dict().items():
            print(f'{key}: {value}')

    record = read_file(args.file)
    print(f'ASPH version: {record.version}')
    print(f'Format: {record.format}')
    print(f'Duration: {record.duration_seconds:.2f}s  ({len(record.pcm):,} PCM bytes)')


def cmd_version(args: argparse.Namespace, config: PlayerConfig):
    print(f'AudioSphere {__version__}  (ASPH format v{VERSION})')


# ─────────────────────────────────────────────────────────────────────────────
# Argument parser
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='audiosphere',
        description='AudioSphere — encrypted PCM container encoder, decoder and player.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 audiosphere.py encode song.wav song.asph
  python3 audiosphere.py decode song.asph song.wav
  python3 audiosphere.py play song.asph --loop
  python3 audiosphere.py metadata song.asph "Title" "Artist" "Album"
  python3 audiosphere.py info song.asph

During playback (type the key, then Enter):
  p      pause / resume
  + / -  volume up / down
  f / b  seek forward / backward 10 seconds
  q      stop playback
""",
    )
    p.add_argument('--debug', action='store_true', help='Enable debug logging')
    sub = p.add_subparsers(dest='command', required=True)

    enc = sub.add_parser('encode', help='Encode a WAV file to ASPH')
    enc.add_argument('input')
    enc.add_argument('output')
    enc.add_argument('--version', type=int, default=VERSION, choices=range(256),
                     metavar='0-255',
                     help=f'Version byte to store (default {VERSION})')
    enc.set_defaults(func=cmd_encode)

    dec = sub.add_parser('decode', help='Decode an ASPH file to WAV')
    dec.add_argument('input')
    dec.add_argument('output')
    dec.set_defaults(func=cmd_decode)

    ply = sub.add_parser('play', help='Play an ASPH file')
    ply.add_argument('input')
    ply.add_argument('mode', nargs='?', choices=['loop'],
                     help='"loop" to repeat (same as --loop)')
    ply.add_argument('--loop', action='store_true', help='Loop at end of buffer')
    ply.set_defaults(func=cmd_play)

    met = sub.add_parser('metadata', help='Append a title/artist/album trailer')
    met.add_argument('file')
    met.add_argument('title')
    met.add_argument('artist')
    met.add_argument('album', nargs='?', default='')
    met.set_defaults(func=cmd_metadata)

    inf = sub.add_parser('info', help='Show format and metadata')
    inf.add_argument('file')
    inf.set_defaults(func=cmd_info)

    ver = sub.add_parser('version', help='Print version')
    ver.set_defaults(func=cmd_version)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = PlayerConfig.load_from_env()
    _setup_logging('DEBUG' if args.debug else config.log_level)

    try:
        args.func(args, config)
    except AsphError as exc:
        print(f'✗ {exc.summary()}', file=sys.stderr)
        return 1
    except OSError as exc:
        print(f'✗ {exc}', file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print('\n✗ Interrupted.', file=sys.stderr)
        return 130
    return 0


if __name__ == '__main__':
    sys.exit(main())
