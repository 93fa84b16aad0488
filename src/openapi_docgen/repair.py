"""Repair stale ``<APIPage document={"..."} />`` references in translated MDX pages.

After regeneration a document may move (a tag was renamed, an operationId
changed), while translated pages still point at the old location. The file
name keeps its endpoint id, so a stale reference is rewritten when exactly
one generated file has the same basename. Ambiguous matches are left alone.
"""

import logging
import os
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from openapi_docgen.generator.naming import DOCUMENT_SUFFIX

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".mdx"


@dataclass(frozen=True)
class FileRepair:
    path: Path
    fixed_refs: int = 0
    unresolved_refs: int = 0
    changed: bool = False
    skipped: bool = False


@dataclass(frozen=True)
class LocaleRepair:
    locale: str
    scanned: int = 0
    changed: int = 0
    fixed_refs: int = 0
    unresolved_refs: int = 0
    skipped: int = 0

    def summary(self) -> str:
        line = (
            f"{self.locale}: scanned={self.scanned}, changed={self.changed}, "
            f"fixedRefs={self.fixed_refs}, unresolvedRefs={self.unresolved_refs}"
        )
        if self.skipped:
            line += f", skipped={self.skipped}"
        return line


def walk_files(root: Path, predicate: Callable[[Path], bool]) -> list[Path]:
    """Files under ``root`` accepted by ``predicate``, in sorted order.

    Unreadable directories (including a missing root) count as empty.
    """

    def on_error(err: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    found = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath, name)
            if predicate(path):
                found.append(path)
    return found


def relative_posix(path: Path, base: Path) -> str:
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def build_index(output_root: Path, base: Path | None = None) -> dict[str, list[str]]:
    """Map each generated document's basename to its paths relative to ``base``."""
    base = base or Path.cwd()
    index: dict[str, list[str]] = {}
    for path in walk_files(output_root, lambda p: p.name.lower().endswith(DOCUMENT_SUFFIX)):
        index.setdefault(path.name, []).append(relative_posix(path, base))
    return index


def reference_pattern(prefix: str) -> re.Pattern:
    return re.compile(r'document=\{"(' + re.escape(prefix.rstrip("/")) + r'/[^"]+?\.json)"\}')


def extract_references(text: str, prefix: str) -> list[str]:
    """Distinct document paths under ``prefix`` referenced by ``text``, in order."""
    return list(dict.fromkeys(reference_pattern(prefix).findall(text)))


def repair_file(path: Path, index: dict[str, list[str]], base: Path, prefix: str) -> FileRepair:
    try:
        original = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("%s: skipped, cannot read page (%s)", path, e)
        return FileRepair(path, skipped=True)
    text = original
    fixed = unresolved = 0

    for ref in extract_references(original, prefix):
        if base.joinpath(*PurePosixPath(ref).parts).is_file():
            continue
        candidates = index.get(PurePosixPath(ref).name, [])
        if len(candidates) == 1:
            text = text.replace(f'document={{"{ref}"}}', f'document={{"{candidates[0]}"}}')
            fixed += 1
            logger.debug("%s: %s -> %s", path, ref, candidates[0])
        else:
            unresolved += 1
            if candidates:
                logger.warning("%s: %s is ambiguous (%d candidates)", path, ref, len(candidates))
            else:
                logger.warning("%s: %s has no generated counterpart", path, ref)

    changed = text != original
    if changed:
        path.write_text(text, encoding="utf-8")
    return FileRepair(path, fixed, unresolved, changed)


def repair_locale(
    locale: str,
    index: dict[str, list[str]],
    *,
    content_root: Path,
    base: Path,
    prefix: str,
) -> LocaleRepair:
    pages = walk_files(content_root / locale / "api", lambda p: p.name.lower().endswith(PAGE_SUFFIX))
    changed = fixed = unresolved = skipped = 0
    for page in pages:
        result = repair_file(page, index, base, prefix)
        changed += result.changed
        fixed += result.fixed_refs
        unresolved += result.unresolved_refs
        skipped += result.skipped
    return LocaleRepair(locale, len(pages), changed, fixed, unresolved, skipped)


def repair(
    locales: Iterable[str],
    *,
    output_root: Path,
    content_root: Path,
    base: Path | None = None,
) -> list[LocaleRepair]:
    """Repair every locale in turn; returns one summary per locale."""
    base = base or Path.cwd()
    index = build_index(output_root, base)
    prefix = relative_posix(output_root, base)
    results = []
    for locale in locales:
        result = repair_locale(locale, index, content_root=content_root, base=base, prefix=prefix)
        logger.info("[repair] %s", result.summary())
        results.append(result)
    return results
