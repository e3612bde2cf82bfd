#run_augmentation.py

"""
Main entry point for the dataset augmentation utility.
This script reads a YAML configuration file and runs the optional
preparation stages (grouping by size, pairing, RGBA conversion) followed by
the augmentation itself.
"""
import argparse
import pprint
from pathlib import Path

from dataset_augmentor.augmenter import DatasetAugmenter
from dataset_augmentor.config import load_config
from dataset_augmentor.execution.progress import TqdmSink
from dataset_augmentor.preparers.dimension_preparer import group_by_dimensions
from dataset_augmentor.preparers.format_preparer import convert_to_rgba
from dataset_augmentor.preparers.pair_preparer import remove_unpaired_files


def main():
    """Parses command line arguments, loads config, and starts the process."""
    parser = argparse.ArgumentParser(description="Dataset Augmentation Utility")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the YAML configuration file for the augmentation run."
    )
    args = parser.parse_args()

    config = load_config(Path(args.config))

    print("--- Configuration Loaded ---")
    pprint.pprint(config.model_dump())
    print("-" * 50)

    input_root = Path(config.input_root)
    output_root = Path(config.output_root)

    # --- Stage 1: Preprocessing ---
    print("--- Stage 1: PREPROCESSING ---")
    if config.preprocess.enabled:
        staging_root = Path(config.preprocess.staging_root)
        group_by_dimensions(
            input_root,
            staging_root,
            min_count=config.preprocess.min_count,
            square_only=config.preprocess.square_only,
        )
        # DEV: Дальше аугментируем уже сгруппированные по размеру файлы.
        input_root = staging_root
    else:
        print("Preprocessing disabled, augmenting the input directory as is.")

    # --- Stage 2: Pairing ---
    print("-" * 50)
    print("--- Stage 2: PAIRING ---")
    if config.pairing.enabled:
        remove_unpaired_files(
            input_root,
            Path(config.pairing.counterpart_root),
            config.pairing.scale_factor,
        )
    else:
        print("Pairing disabled, no files are removed.")

    # --- Stage 3: Conversion ---
    print("-" * 50)
    print("--- Stage 3: CONVERSION ---")
    if config.conversion.enabled:
        # DEV: Конвертация идет на месте - с включенным preprocess это копии в staging_root.
        convert_to_rgba(input_root)
    else:
        print("Conversion disabled, images are read as they are.")

    # --- Stage 4: Augmentation ---
    print("-" * 50)
    print("--- Stage 4: AUGMENTATION ---")

    augmenter = DatasetAugmenter(sink=TqdmSink(), workers=config.workers)
    augmenter.augment_directory(
        input_root=input_root,
        output_root=output_root,
        transformation_names=config.transformations,
        base_seed=config.seed,
    )

    print("-" * 50)
    print(f"Process finished successfully. Augmented dataset is available at: {output_root}")


if __name__ == "__main__":
    main()
