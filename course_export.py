"""
course_export.py - Command line export of course maps, tee signs and booklets

Usage:
    course-export course.json --layout course --output course.svg
    course-export course.json --layout tee-signs --output signs.zip --assets assets/
    course-export course.json --layout print --output booklet/ --config print.json

Tee signs written to a .zip archive are packaged with the raster assets
they reference, so the archive opens correctly on its own.
"""

import argparse
import json
import sys
import zipfile
from pathlib import Path
from typing import List, Optional

from course_map import generate_course_svg
from course_model import Course, load_course
from export_config import ExportConfig, InvalidExportConfig, PrintConfig, TeeSignConfig, load_export_config
from print_layout import generate_hole_page_svg, generate_print_layout_svg
from render_context import ImageCache
from tee_sign import generate_tee_sign_svg
from terrain_patterns import GRASS_IMAGE, HIGHGRASS_IMAGE, TREE_IMAGES

ASSET_NAMES = (GRASS_IMAGE, HIGHGRASS_IMAGE) + TREE_IMAGES

LAYOUT_CONFIGS = {
    "course": ExportConfig,
    "tee-signs": TeeSignConfig,
    "print": PrintConfig,
}


def hole_file_name(number: int) -> str:
    """Archive/file name of one hole's page ('hole_07.svg')."""
    return f"hole_{number:02d}.svg"


def tee_sign_documents(course: Course, config: ExportConfig, images: Optional[ImageCache] = None):
    """(file name, SVG) of the tee sign of every hole, in hole order."""
    for hole in course.holes:
        yield hole_file_name(hole.number), generate_tee_sign_svg(course, hole, config, images)


def package_tee_signs(course: Course, config: ExportConfig, output_path, asset_dir=None) -> List[str]:
    """Write every tee sign plus the available raster assets into a ZIP archive.

    Signs reference assets by relative file name; assets found in asset_dir
    are stored next to them under the same names.

    Returns:
        Names written to the archive
    """
    output_path = Path(output_path)
    written = []
    with zipfile.ZipFile(output_path, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, svg in tee_sign_documents(course, config):
            archive.writestr(name, svg)
            written.append(name)
            if config.verbose:
                print(f"  Added {name}")

        if asset_dir is not None:
            for asset in ASSET_NAMES:
                path = Path(asset_dir) / asset
                if not path.exists():
                    if config.verbose:
                        print(f"  Warning: asset {asset} not found in {asset_dir}")
                    continue
                archive.write(path, asset)
                written.append(asset)
    return written


def _write(path: Path, content: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    print(f"  Saved: {path}")


def export_course(course: Course, config: ExportConfig, layout: str, output: Path,
                  images: Optional[ImageCache] = None, asset_dir=None) -> List[Path]:
    """Render one layout to disk.

    Args:
        course: Loaded course
        config: Validated export options
        layout: "course", "tee-signs" or "print"
        output: Output file (course layout, tee-sign .zip) or directory
        images: Raster assets to inline into loose SVG files
        asset_dir: Asset directory packaged into tee-sign archives

    Returns:
        Paths written
    """
    if layout == "course":
        _write(output, generate_course_svg(course, config, images))
        return [output]

    if layout == "tee-signs":
        if output.suffix.lower() == ".zip":
            output.parent.mkdir(parents=True, exist_ok=True)
            names = package_tee_signs(course, config, output, asset_dir)
            print(f"  Saved: {output} ({len(names)} files)")
            return [output]
        paths = []
        for name, svg in tee_sign_documents(course, config, images):
            _write(output / name, svg)
            paths.append(output / name)
        return paths

    paths = [output / "overview.svg"]
    _write(paths[0], generate_print_layout_svg(course, config, images))
    for hole in course.holes:
        path = output / hole_file_name(hole.number)
        _write(path, generate_hole_page_svg(hole, course, config, images))
        paths.append(path)
    return paths


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Export a disc golf course as SVG maps, tee signs or print pages"
    )
    parser.add_argument("course", type=Path, help="Course JSON file saved by the editor")
    parser.add_argument("--layout", choices=sorted(LAYOUT_CONFIGS), default="course",
                        help="What to render (default: course)")
    parser.add_argument("--config", type=Path, help="JSON file of export options")
    parser.add_argument("--output", type=Path,
                        help="Output file or directory (default: derived from the course file name)")
    parser.add_argument("--assets", type=Path,
                        help="Directory holding grass.jpg, highgrass.jpg and tree1-4.png")
    parser.add_argument("--verbose", action="store_true", help="Print progress while rendering")

    args = parser.parse_args(argv)

    print("=" * 60)
    print(f"Course export: {args.course.name} ({args.layout})")
    print("=" * 60)

    config_class = LAYOUT_CONFIGS[args.layout]
    try:
        if args.config:
            config = load_export_config(args.config, config_class)
        else:
            config = config_class()
        if args.verbose:
            config.verbose = True
        config.validate()
        course = load_course(args.course, verbose=config.verbose)
    except InvalidExportConfig as e:
        print(f"Error: {e}")
        return 2
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read course {args.course}: {e}")
        return 2

    print(f"  {course.name or course.id}: {len(course.holes)} holes")

    images = None
    if args.assets:
        images = ImageCache.from_directory(args.assets, ASSET_NAMES, verbose=config.verbose)
        print(f"  Loaded {len(images)} raster assets")

    output = args.output
    if output is None:
        stem = args.course.stem
        output = Path(f"{stem}.svg") if args.layout == "course" else Path(f"{stem}_{args.layout}")

    try:
        paths = export_course(course, config, args.layout, output, images, args.assets)
    except InvalidExportConfig as e:
        print(f"Error: {e}")
        return 2

    print(f"\nDone: {len(paths)} file(s) written")
    return 0


if __name__ == "__main__":
    sys.exit(main())
