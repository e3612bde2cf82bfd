#dataset_augmentor/augmenter.py

"""
Main orchestration logic: turns a list of input images and a list of
transformation names into deterministic augmented variants on disk.
"""
import traceback
from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Set

from pydantic import BaseModel

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.errors import ConfigError, SetupIoError, CodecError
from dataset_augmentor.execution.executor import ParallelExecutor
from dataset_augmentor.execution.progress import EventSink, NullSink, ProgressReporter
from dataset_augmentor.processing.pipeline import AugmentationPipeline, output_variants, split_transformations
from dataset_augmentor.processing.registry import TransformationRegistry, default_registry
from dataset_augmentor.processing.seeding import normalize_stem, U64_MAX
from dataset_augmentor.utils import image_utils
from dataset_augmentor.utils.file_utils import collect_image_paths, create_dir_if_not_exists
from dataset_augmentor.writers.base_writer import BaseWriter
from dataset_augmentor.writers.png_writer import PngWriter


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class AugmentationJob(BaseModel):
    """Everything a worker needs to augment one file."""
    input_path: Path
    output_base: Path
    always: List[str]
    one_time: List[str]
    base_seed: int

    @property
    def stem(self) -> str:
        return normalize_stem(self.input_path.stem)


def check_directories(input_root: str | Path, output_root: str | Path) -> None:
    """Raises ConfigError naming every directory setting that is empty."""
    missing = [name for name, value in (("input", input_root), ("output", output_root))
               if value is None or not str(value).strip()]
    if missing:
        raise ConfigError(f"Directories {', '.join(missing)} aren't set.")


def _path_key(path: Path) -> str:
    # Case-insensitive file systems map "A.png" and "a.png" to one file
    return str(path).casefold()


def _claim_base(base: Path,
                variants: List[str | None],
                writer: BaseWriter,
                claimed: Set[str]) -> Path:
    """
    Returns the first of `base`, `base_2`, `base_3`, ... none of whose output
    paths is claimed yet, and claims them.
    """
    candidate, counter = base, 1
    while True:
        keys = [_path_key(writer.output_path(candidate, variant)) for variant in variants]
        if claimed.isdisjoint(keys):
            claimed.update(keys)
            return candidate
        counter += 1
        candidate = base.parent / f"{base.name}_{counter}"


def plan_jobs(image_paths: Sequence[Path],
              input_root: Path,
              output_root: Path,
              always: List[str],
              one_time: List[str],
              base_seed: int,
              writer: BaseWriter | None = None) -> List[AugmentationJob]:
    """
    Creates one job per input file with a collision-free output base.

    The output base mirrors the file's location under `input_root`, without the
    extension. If several inputs would share a base (e.g. `a.png` and `a.jpg`),
    all of them get their source extension appended (`a_png`, `a_jpg`).

    Every path a job can write (the original, `_shifted` and one file per
    one-time transform) is then checked against the paths of all other jobs.
    A job whose outputs clash with an earlier one (in path order) gets a
    numeric suffix (`a_png_2`), so `cat.png` and `cat_invert.png` never share
    `cat_invert.png`.

    Raises:
        ConfigError: If an input path does not live under `input_root`.
    """
    writer = writer or PngWriter()
    image_paths = list(dict.fromkeys(image_paths))

    natural: Dict[Path, Path] = {}
    for path in image_paths:
        try:
            relative = path.relative_to(input_root)
        except ValueError as e:
            raise ConfigError(f"Input file {path} is not inside the input directory {input_root}.") from e
        natural[path] = output_root / relative.parent / relative.stem

    # DEV: Решение о коллизии принимается по всему множеству сразу, а не по
    # порядку обхода - иначе имена зависели бы от порядка файлов.
    groups: Dict[str, List[Path]] = defaultdict(list)
    for path, base in natural.items():
        groups[_path_key(base)].append(path)

    variants = output_variants(always, one_time)
    claimed: Set[str] = set()
    bases: Dict[Path, Path] = {}
    for path in sorted(natural, key=str):
        base = natural[path]
        if len(groups[_path_key(base)]) > 1:
            base = base.parent / f"{base.name}_{path.suffix.lstrip('.').lower()}"
        bases[path] = _claim_base(base, variants, writer, claimed)

    return [
        AugmentationJob(
            input_path=path,
            output_base=bases[path],
            always=always,
            one_time=one_time,
            base_seed=base_seed,
        )
        for path in image_paths
    ]


def process_job(job: AugmentationJob, registry: TransformationRegistry, writer: BaseWriter) -> bool:
    """
    Augments a single file: re-encodes the original, then writes every variant.

    Per-file errors are reported and swallowed so that the run goes on.

    Returns:
        True if every output of the file was written.
    """
    try:
        image = image_utils.read_rgba_safe(job.input_path)
        # The original goes first, re-encoded rather than copied
        writer.write(image, job.output_base)

        pipeline = AugmentationPipeline(job.always, job.one_time, registry)
        for item in pipeline.process(image, job.stem, job.base_seed):
            writer.write(item['image'], job.output_base, item['variant'])
        return True

    except CodecError as e:
        print(f"\n[WARNING] Skipping file '{job.input_path}' due to a codec error: {e}")
    except Exception as e:
        print(f"\n[ERROR] Failed to process file '{job.input_path}'. Error: {e}")
        # DEV: traceback - для непредвиденных ошибок, иначе их не отладить.
        traceback.print_exc()
    return False


class DatasetAugmenter:
    """
    Orchestrates a single augmentation run.

    This class is responsible for:
    1. Validating the directories and creating the output root.
    2. Classifying the requested transformations into always / one-time.
    3. Planning one job per input file.
    4. Dispatching the jobs to the parallel executor while the progress
       reporter emits throttled progress events.
    """

    def __init__(self,
                 sink: EventSink | None = None,
                 registry: TransformationRegistry | None = None,
                 writer: BaseWriter | None = None,
                 workers: int | None = None,
                 chunk_size: int = SETTINGS.EXECUTION.CHUNK_SIZE,
                 poll_interval: float = SETTINGS.EXECUTION.PROGRESS_POLL_INTERVAL):
        """
        Args:
            sink: Receives started / progress / finished / error events.
            registry: Transformation catalog. Defaults to the built-in one.
            writer: Output writer. Defaults to PngWriter.
            workers: Worker threads. Defaults to CPU count minus one (at least 1).
            chunk_size: Files per chunk.
            poll_interval: Seconds between progress polls.
        """
        self.sink = sink or NullSink()
        self.registry = registry or default_registry()
        self.writer = writer or PngWriter()
        self.executor = ParallelExecutor(workers, chunk_size)
        self.poll_interval = poll_interval
        self.state = RunState.IDLE

    def resolve_transformations(self, names: Iterable[str]) -> tuple[List[str], List[str]]:
        """
        Deduplicates the requested names (first occurrence wins), drops the
        unknown ones with a warning and splits the rest into always / one-time.
        """
        requested = list(dict.fromkeys(names))
        unknown = [name for name in requested if name not in self.registry]
        for name in unknown:
            print(f"[WARNING] Transformation '{name}' is not implemented, no '_{name}' outputs will be produced.")
        return split_transformations(name for name in requested if name in self.registry)

    def run(self,
            image_paths: Sequence[Path],
            input_root: Path,
            output_root: Path,
            transformation_names: Iterable[str],
            base_seed: int) -> None:
        """
        Augments every file in `image_paths`.

        Per-file and per-transform failures are only reported on the console; the
        run still completes. Setup failures emit an `error` event and are raised.

        Raises:
            ConfigError: Directories missing, seed out of range or inputs outside `input_root`.
            SetupIoError: The output root cannot be created.
        """
        self.state = RunState.IDLE
        try:
            check_directories(input_root, output_root)
            input_root, output_root = Path(input_root), Path(output_root)
            if not 0 <= base_seed <= U64_MAX:
                raise ConfigError(f"Seed must be an unsigned 64-bit integer, got {base_seed}.")
            try:
                create_dir_if_not_exists(output_root)
            except OSError as e:
                raise SetupIoError(f"Cannot create output directory {output_root}: {e}") from e

            always, one_time = self.resolve_transformations(transformation_names)
            jobs = plan_jobs(sorted(image_paths), input_root, output_root, always, one_time, base_seed,
                             self.writer)
        except (ConfigError, SetupIoError) as e:
            self._fail(e)
            raise

        self.state = RunState.RUNNING
        total = len(jobs)
        print(f"Augmenting {total} files. Always: {always or '-'}, one-time: {one_time or '-'}. "
              f"Output: {output_root}")
        self.sink.emit("started", {"total": total})

        reporter = ProgressReporter(total, self.sink, self.poll_interval)
        reporter.start()
        try:
            self.executor.execute(jobs, self._process, reporter)
        except Exception as e:
            # process_job reports its own errors, so this is a bug, not a bad file
            reporter.stop()
            self._fail(e)
            raise
        reporter.stop()

        self.state = RunState.COMPLETED
        self.sink.emit("finished", None)
        print(f"Augmentation finished. Results are available at: {output_root}")

    def augment_directory(self,
                          input_root: str | Path,
                          output_root: str | Path,
                          transformation_names: Iterable[str],
                          base_seed: int) -> None:
        """Discovers every supported image under `input_root` and runs on them."""
        try:
            check_directories(input_root, output_root)
            image_paths = collect_image_paths(Path(input_root))
        except (ConfigError, SetupIoError) as e:
            self._fail(e)
            raise

        if not image_paths:
            print(f"Warning: No images found under {input_root}.")
        self.run(image_paths, Path(input_root), Path(output_root), transformation_names, base_seed)

    def _process(self, job: AugmentationJob) -> None:
        process_job(job, self.registry, self.writer)

    def _fail(self, error: Exception) -> None:
        self.state = RunState.FAILED
        self.sink.emit("error", {"message": str(error)})


def run(image_paths: Sequence[Path],
        input_root: Path,
        output_root: Path,
        transformation_names: Iterable[str],
        base_seed: int,
        sink: EventSink | None = None,
        workers: int | None = None) -> None:
    """Convenience wrapper: one run with a fresh DatasetAugmenter."""
    DatasetAugmenter(sink=sink, workers=workers).run(
        image_paths, input_root, output_root, transformation_names, base_seed
    )
