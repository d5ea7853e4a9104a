#!/usr/bin/env python3
"""
Replay a recorded landmark stream through the squat analyzer.

Input is a JSON-lines file, one frame per line, either a bare list of 33
keypoints or {"landmarks": [...], "timestamp_ms": float}.

- Without --base-url the frames run through an in-process SquatAnalyzer.
- With --base-url they are POSTed to /posture of a running server, framed by
  /session/start and /session/stop.
- Optionally exports angle_timeline.csv with columns: t_ms, knee_angle, phase, is_rep
- Prints the session summary as JSON.

Usage:
  python scripts/replay_landmarks.py recording.jsonl --out exports/
  python scripts/replay_landmarks.py recording.jsonl --base-url http://127.0.0.1:8000
"""
from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests
from loguru import logger

from squat_coach.core.config import get_settings
from squat_coach.core.logging_config import setup_logging


def read_frames(path: Path, fps: float) -> Iterator[Tuple[List[Any], float]]:
    """Yield (landmarks, timestamp_ms); missing timestamps are synthesized from fps."""
    step_ms = 1000.0 / max(1.0, fps)
    with path.open("r", encoding="utf-8") as f:
        for i, line in enumerate(f):
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            if isinstance(row, dict):
                landmarks = row.get("landmarks") or []
                ts = row.get("timestamp_ms")
            else:
                landmarks, ts = row, None
            yield landmarks, float(ts) if ts is not None else i * step_ms


def replay_local(frames: Iterator[Tuple[List[Any], float]]) -> Tuple[Dict[str, Any], List[List[Any]]]:
    from squat_coach.vision.pipeline import SquatAnalyzer

    analyzer = SquatAnalyzer()
    first_ts: Optional[float] = None
    last_ts = 0.0
    timeline: List[List[Any]] = []
    for landmarks, ts in frames:
        if first_ts is None:
            first_ts = ts
            analyzer.reset_session(ts / 1000.0)
        last_ts = ts
        res = analyzer.process_frame(landmarks, now_ms=ts)
        timeline.append([f"{ts:.0f}", res.knee_angle, res.phase.value, 1 if res.rep else 0])
    summary = analyzer.summarize(last_ts / 1000.0)
    return {**summary.to_dict(), "voice_prompt": summary.voice_prompt()}, timeline


def replay_remote(base_url: str, frames: Iterator[Tuple[List[Any], float]]) -> Tuple[Dict[str, Any], List[List[Any]]]:
    base = base_url.rstrip("/")
    r = requests.post(f"{base}/session/start", json={}, timeout=5)
    r.raise_for_status()
    timeline: List[List[Any]] = []
    for landmarks, ts in frames:
        r = requests.post(f"{base}/posture", json={"landmarks": landmarks, "timestamp_ms": ts}, timeout=5)
        if r.status_code != 200:
            logger.warning("Frame at {} rejected: HTTP {}", ts, r.status_code)
            continue
        d = (r.json() or {}).get("data") or {}
        timeline.append([f"{ts:.0f}", d.get("knee_angle"), d.get("phase"), 1 if d.get("rep") else 0])
    r = requests.post(f"{base}/session/stop", json={}, timeout=5)
    r.raise_for_status()
    return (r.json() or {}).get("data") or {}, timeline


def write_csv(path: Path, header: List[str], rows: List[List[Any]]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(header)
        for r in rows:
            w.writerow(r)


def main() -> int:
    ap = argparse.ArgumentParser(description="Replay recorded landmarks through the squat analyzer")
    ap.add_argument("recording", type=Path, help="JSON-lines file with one landmark frame per line")
    ap.add_argument("--base-url", default=None, help="Send frames to a running server instead of in-process")
    ap.add_argument("--fps", type=float, default=30.0, help="Frame rate used when timestamps are missing")
    ap.add_argument("--out", default=None, help="Directory for angle_timeline.csv")
    args = ap.parse_args()

    setup_logging(get_settings().log_level)
    frames = read_frames(args.recording, args.fps)
    if args.base_url:
        summary, timeline = replay_remote(args.base_url, frames)
    else:
        summary, timeline = replay_local(frames)

    if args.out:
        out_dir = Path(args.out)
        out_dir.mkdir(parents=True, exist_ok=True)
        write_csv(out_dir / "angle_timeline.csv", ["t_ms", "knee_angle", "phase", "is_rep"], timeline)
        logger.info("Timeline written to {}", out_dir / "angle_timeline.csv")

    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
