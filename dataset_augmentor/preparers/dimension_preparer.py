#dataset_augmentor/preparers/dimension_preparer.py

"""
A preparer that sorts a raw image folder by image size:
- <output_root>/<W>x<H>/<filename>
A file name shared by several subfolders is prefixed with its relative folder.
Only groups that pass every configured filter are written.
"""
import shutil
from collections import Counter, defaultdict
from pathlib import Path
from typing import Callable, Dict, List, Set, Tuple

from tqdm import tqdm

from dataset_augmentor.errors import CodecError
from dataset_augmentor.utils import image_utils
from dataset_augmentor.utils.file_utils import collect_image_paths, create_dir_if_not_exists

# A filter sees the (width, height) of a group and its files
DimensionFilter = Callable[[Tuple[int, int], List[Path]], bool]


def build_filters(min_count: int | None = None, square_only: bool = False) -> List[DimensionFilter]:
    """Translates the config options into filter callables."""
    filters: List[DimensionFilter] = []
    if min_count is not None:
        filters.append(lambda dims, files: len(files) >= min_count)
    if square_only:
        filters.append(lambda dims, files: dims[0] == dims[1])
    return filters


def destination_names(files: List[Path], input_root: Path) -> Dict[Path, str]:
    """
    File names inside a size folder. A name shared by files from different
    subfolders is prefixed with the relative folder: `cats/a.png` -> `cats_a.png`.
    """
    counts = Counter(file.name.casefold() for file in files)
    names: Dict[Path, str] = {}
    for file in files:
        if counts[file.name.casefold()] > 1:
            names[file] = "_".join(file.relative_to(input_root).parts)
        else:
            names[file] = file.name
    return names


def collect_by_dimensions(input_root: Path) -> Dict[Tuple[int, int], List[Path]]:
    """Decodes every supported image and groups the paths by (width, height)."""
    groups: Dict[Tuple[int, int], List[Path]] = defaultdict(list)
    for path in tqdm(collect_image_paths(input_root), desc="Reading image sizes"):
        try:
            image = image_utils.read_rgba_safe(path)
        except CodecError as e:
            print(f"\n[WARNING] Skipping unreadable file '{path}': {e}")
            continue
        height, width = image.shape[:2]
        groups[(width, height)].append(path)
    return dict(groups)


def group_by_dimensions(input_root: Path,
                        output_root: Path,
                        min_count: int | None = None,
                        square_only: bool = False) -> Dict[str, int]:
    """
    Copies every image under `input_root` into a `<W>x<H>` folder under `output_root`.

    Args:
        input_root: Raw image folder, scanned recursively.
        output_root: Where the grouped folders are created.
        min_count: Skip sizes with fewer files than this.
        square_only: Keep only square images.

    Returns:
        {"<W>x<H>": number of files copied} for every group that was written.
    """
    filters = build_filters(min_count, square_only)
    groups = collect_by_dimensions(input_root)

    written: Dict[str, int] = {}
    for (width, height), files in sorted(groups.items()):
        if not all(f((width, height), files) for f in filters):
            continue

        group_name = f"{width}x{height}"
        group_dir = output_root / group_name
        create_dir_if_not_exists(group_dir)
        used: Set[str] = set()
        for file, name in destination_names(files, input_root).items():
            if name.casefold() in used:
                print(f"\n[WARNING] Skipping '{file}': '{name}' is already taken in {group_dir}.")
                continue
            shutil.copy2(file, group_dir / name)
            used.add(name.casefold())
        written[group_name] = len(used)

    print(f"Grouped {sum(written.values())} files into {len(written)} size folders at: {output_root}")
    return written
