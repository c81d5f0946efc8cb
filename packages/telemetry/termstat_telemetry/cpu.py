"""Per-CPU scaling frequency and idle-time readers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Sequence

import psutil

from .errors import ParseFailure, ReadFailure, ResourceUnavailable
from .models import CpuBounds, CpuFrequencySample, CpuIdleSample
from .sources import DeltaCounter, PseudoFile, parse_int, read_once


def online_cpu_count() -> int:
    count = psutil.cpu_count(logical=True)
    if not count:
        raise ResourceUnavailable("cannot determine number of online cpus", source="cpu_count")
    return int(count)


def parse_cpu_list(text: str, source: str) -> tuple[int, ...]:
    """Kernel cpu list syntax, e.g. `0-3,5,7-8`."""
    indices: set[int] = set()
    for part in text.strip().split(","):
        if not part:
            continue
        first, dash, last = part.partition("-")
        try:
            low = int(first)
            high = int(last) if dash else low
        except ValueError:
            raise ParseFailure(f"malformed cpu list {text.strip()!r} in {source}", source=source) from None
        if low < 0 or high < low:
            raise ParseFailure(f"bad cpu range {part!r} in {source}", source=source)
        indices.update(range(low, high + 1))
    if not indices:
        raise ParseFailure(f"empty cpu list in {source}", source=source)
    return tuple(sorted(indices))


def online_cpus(sys_root: Path | str) -> tuple[int, ...]:
    """Indices of the online logical CPUs.

    Offline CPUs leave holes (`0-1,3`), so positions and `cpuN` names differ.
    Without the sysfs list every CPU psutil counts is assumed online.
    """
    path = Path(sys_root) / "devices" / "system" / "cpu" / "online"
    text = read_once(path, required=False)
    if text is None:
        return tuple(range(online_cpu_count()))
    return parse_cpu_list(text, str(path))


def cpufreq_dir(sys_root: Path | str, index: int) -> Path:
    return Path(sys_root) / "devices" / "system" / "cpu" / f"cpu{index}" / "cpufreq"


class CpuFrequencyReader:
    """Reads scaling_cur_freq for every online logical CPU.

    The min/max scaling bounds are read once in `open()` and cached; hardware
    limits do not move during a session. scaling_cur_freq stays open and is
    reread from offset 0 each cycle.
    """

    def __init__(
        self,
        sys_root: Path | str = "/sys",
        cpu_count: int | None = None,
        cpus: Sequence[int] | None = None,
    ) -> None:
        self.sys_root = Path(sys_root)
        if cpus is None and cpu_count is not None:
            cpus = range(cpu_count)
        self._cpus = tuple(cpus) if cpus is not None else None
        self._indices: tuple[int, ...] = ()
        self._bounds: tuple[CpuBounds, ...] = ()
        self._current: list[PseudoFile] = []

    @property
    def bounds(self) -> tuple[CpuBounds, ...]:
        return self._bounds

    def open(self) -> "CpuFrequencyReader":
        if self._current:
            return self
        indices = self._cpus if self._cpus is not None else online_cpus(self.sys_root)
        bounds: list[CpuBounds] = []
        handles: list[PseudoFile] = []
        try:
            for index in indices:
                base = cpufreq_dir(self.sys_root, index)
                min_path = base / "scaling_min_freq"
                max_path = base / "scaling_max_freq"
                min_khz = parse_int(read_once(min_path), str(min_path))
                max_khz = parse_int(read_once(max_path), str(max_path))
                if max_khz < min_khz:
                    raise ParseFailure(
                        f"cpu {index} scaling_max_freq {max_khz} below scaling_min_freq {min_khz}",
                        source=str(base),
                    )
                bounds.append(CpuBounds(index=index, min_khz=min_khz, max_khz=max_khz))
                handles.append(PseudoFile(base / "scaling_cur_freq").open())
        except Exception:
            for handle in handles:
                handle.close()
            raise

        self._indices = tuple(indices)
        self._bounds = tuple(bounds)
        self._current = handles
        return self

    def sample(self) -> tuple[CpuFrequencySample, ...]:
        if not self._current:
            raise ReadFailure("cpu frequency reader sampled before open", source=str(self.sys_root))
        return tuple(
            CpuFrequencySample(index=index, current_khz=parse_int(handle.read(), str(handle.path)))
            for index, handle in zip(self._indices, self._current)
        )

    def close(self) -> None:
        for handle in self._current:
            handle.close()
        self._current = []

    def __enter__(self) -> "CpuFrequencyReader":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()


def _psutil_cpu_times() -> Sequence[Any]:
    return psutil.cpu_times(percpu=True)


class CpuLoadReader:
    """Idle seconds consumed per CPU since the previous sample.

    psutil exposes cumulative idle time; each CPU gets a `DeltaCounter` so the
    reader hands out reset-on-read deltas and callers never difference anything.
    psutil lists online CPUs only, so row N belongs to the N-th online index.
    iowait counts as idle.
    """

    def __init__(
        self,
        cpu_times: Callable[[], Sequence[Any]] = _psutil_cpu_times,
        sys_root: Path | str | None = None,
        cpus: Sequence[int] | None = None,
    ) -> None:
        self._cpu_times = cpu_times
        self.sys_root = Path(sys_root) if sys_root is not None else None
        self._cpus = tuple(cpus) if cpus is not None else None
        self._snapshot: Sequence[Any] = ()
        self._indices: tuple[int, ...] = ()
        self._counters: list[DeltaCounter] = []

    def _refresh(self) -> None:
        try:
            self._snapshot = self._cpu_times()
        except (OSError, psutil.Error) as exc:
            raise ReadFailure(f"cannot read per-cpu times: {exc}", source="cpu_times") from exc

    def _idle(self, position: int) -> float:
        times = self._snapshot[position]
        return float(times.idle) + float(getattr(times, "iowait", 0.0))

    def open(self) -> "CpuLoadReader":
        if self._counters:
            return self
        self._refresh()
        if not self._snapshot:
            raise ResourceUnavailable("no per-cpu times available", source="cpu_times")
        if self._cpus is not None:
            indices = self._cpus
        elif self.sys_root is not None:
            indices = online_cpus(self.sys_root)
        else:
            indices = tuple(range(len(self._snapshot)))
        if len(indices) != len(self._snapshot):
            raise ResourceUnavailable(
                f"{len(self._snapshot)} per-cpu time rows for {len(indices)} online cpus",
                source="cpu_times",
            )
        self._indices = tuple(indices)
        self._counters = [
            DeltaCounter(lambda position=position: self._idle(position), name=f"cpu{index}.idle")
            for position, index in enumerate(self._indices)
        ]
        for counter in self._counters:
            counter.prime()
        return self

    def sample(self) -> tuple[CpuIdleSample, ...]:
        if not self._counters:
            raise ReadFailure("cpu load reader sampled before open", source="cpu_times")
        self._refresh()
        if len(self._snapshot) != len(self._counters):
            raise ReadFailure(
                f"cpu count changed from {len(self._counters)} to {len(self._snapshot)}",
                source="cpu_times",
            )
        return tuple(
            CpuIdleSample(index=index, idle_delta_s=counter.take())
            for index, counter in zip(self._indices, self._counters)
        )

    def close(self) -> None:
        self._counters = []
        self._snapshot = ()

    def __enter__(self) -> "CpuLoadReader":
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()
