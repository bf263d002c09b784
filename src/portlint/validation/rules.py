"""Post-build checks.

Every check is an independent function over scanned paths, binary metadata and
the expected build configuration. It writes its findings to a ``DiagnosticLog``
and returns a ``LintStatus``. Checks never modify the package tree.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from portlint.binary.inspector import BinaryInspector
from portlint.crt_database import OutdatedRuntimeEntry, get_outdated_dynamic_crts
from portlint.models.build_type import BuildType
from portlint.models.package import PackageSpec
from portlint.models.policies import BuildPolicy
from portlint.scanner import (
    get_files_non_recursive,
    get_files_recursive,
    has_extension,
    is_directory,
    is_empty,
    is_empty_directory,
)
from portlint.validation.diagnostics import DiagnosticLog, LintStatus

logger = logging.getLogger(__name__)

LICENSE_FILE_NAMES = ("LICENSE", "LICENSE.txt", "COPYING")
ALLOWED_CONTROL_FILES = ("CONTROL", "BUILD_INFO")
BINARY_INTERFACE_CACHE_EXTENSION = ".ifc"
WINDOWS_STORE = "WindowsStore"


@dataclass(frozen=True)
class FileAndArch:
    file: Path
    actual_arch: str


@dataclass(frozen=True)
class BuildTypeAndFile:
    file: Path
    build_type: BuildType


@dataclass(frozen=True)
class OutdatedDynamicCrtAndFile:
    file: Path
    outdated_crt: OutdatedRuntimeEntry


def check_for_files_in_include_directory(package_dir: Path, log: DiagnosticLog) -> LintStatus:
    include_dir = package_dir / "include"
    if not include_dir.exists() or is_empty(include_dir):
        log.warning(
            "The folder /include is empty or not present. This indicates the library was not correctly installed."
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_for_files_in_debug_include_directory(package_dir: Path, log: DiagnosticLog) -> LintStatus:
    debug_include_dir = package_dir / "debug" / "include"
    files_found = get_files_recursive(
        debug_include_dir,
        lambda path: not path.is_dir() and path.suffix.lower() != BINARY_INTERFACE_CACHE_EXTENSION,
    )

    if files_found:
        log.warning(
            "Include files should not be duplicated into the /debug/include directory. If this cannot be "
            "disabled in the project cmake, use\n"
            "    file(REMOVE_RECURSE ${CURRENT_PACKAGES_DIR}/debug/include)"
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_for_files_in_debug_share_directory(package_dir: Path, log: DiagnosticLog) -> LintStatus:
    if (package_dir / "debug" / "share").exists():
        log.warning(
            "/debug/share should not exist. Please reorganize any important files, then use\n"
            "    file(REMOVE_RECURSE ${CURRENT_PACKAGES_DIR}/debug/share)"
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_folder_lib_cmake(package_dir: Path, spec: PackageSpec, log: DiagnosticLog) -> LintStatus:
    if (package_dir / "lib" / "cmake").exists():
        log.warning(
            f"The /lib/cmake folder should be merged with /debug/lib/cmake and moved to /share/{spec.name}/cmake."
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_for_misplaced_cmake_files(package_dir: Path, spec: PackageSpec, log: DiagnosticLog) -> LintStatus:
    dirs = [
        package_dir / "cmake",
        package_dir / "debug" / "cmake",
        package_dir / "lib" / "cmake",
        package_dir / "debug" / "lib" / "cmake",
    ]

    misplaced_cmake_files: list[Path] = []
    for directory in dirs:
        misplaced_cmake_files.extend(get_files_recursive(directory, has_extension(".cmake")))

    if misplaced_cmake_files:
        log.warning(
            f"The following cmake files were found outside /share/{spec.name}. "
            f"Please place cmake files in /share/{spec.name}.",
            misplaced_cmake_files,
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_folder_debug_lib_cmake(package_dir: Path, spec: PackageSpec, log: DiagnosticLog) -> LintStatus:
    if (package_dir / "debug" / "lib" / "cmake").exists():
        log.warning(f"The /debug/lib/cmake folder should be merged with /lib/cmake into /share/{spec.name}")
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_for_dlls_in_lib_dir(package_dir: Path, log: DiagnosticLog) -> LintStatus:
    """Flag DLLs under ``<package_dir>/lib``; call with the debug subtree for ``debug/lib``."""
    dlls = get_files_recursive(package_dir / "lib", has_extension(".dll"))
    if dlls:
        log.warning(
            "The following dlls were found in /lib or /debug/lib. Please move them to /bin or /debug/bin, respectively.",
            dlls,
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def find_potential_copyright_files(source_root: Path) -> list[Path]:
    """License-looking files at the top of each unpacked source directory.

    Only the root of each source directory is searched to keep false
    positives down.
    """
    candidates: list[Path] = []
    for src_dir in get_files_non_recursive(source_root, is_directory):
        for src_file in get_files_non_recursive(src_dir):
            if src_file.name in LICENSE_FILE_NAMES:
                candidates.append(src_file)
    return candidates


def check_for_copyright_file(
    spec: PackageSpec, package_dir: Path, buildtrees_dir: Path, log: DiagnosticLog
) -> LintStatus:
    """Require ``share/<name>/copyright`` and suggest a likely source for it.

    Args:
        spec: Package being validated
        package_dir: Installed package tree
        buildtrees_dir: Build tree of this package (holds the unpacked sources in ``src``)
        log: Diagnostic sink
    """
    copyright_file = package_dir / "share" / spec.name / "copyright"
    if copyright_file.exists():
        return LintStatus.SUCCESS

    potential_copyright_files = find_potential_copyright_files(buildtrees_dir / "src")

    log.warning(
        f"The software license must be available at ${{CURRENT_PACKAGES_DIR}}/share/{spec.name}/copyright"
    )
    if len(potential_copyright_files) == 1:
        found_file = potential_copyright_files[0]
        relative_path = found_file.relative_to(buildtrees_dir).as_posix()
        log.info(
            f"    file(COPY ${{CURRENT_BUILDTREES_DIR}}/{relative_path} "
            f"DESTINATION ${{CURRENT_PACKAGES_DIR}}/share/{spec.name})\n"
            f"    file(RENAME ${{CURRENT_PACKAGES_DIR}}/share/{spec.name}/{found_file.name} "
            f"${{CURRENT_PACKAGES_DIR}}/share/{spec.name}/copyright)"
        )
    elif len(potential_copyright_files) > 1:
        log.warning("The following files are potential copyright files:", potential_copyright_files)
    return LintStatus.ERROR_DETECTED


def check_for_exes(package_dir: Path, log: DiagnosticLog) -> LintStatus:
    """Flag executables under ``<package_dir>/bin``; call with the debug subtree for ``debug/bin``."""
    exes = get_files_recursive(package_dir / "bin", has_extension(".exe"))
    if exes:
        log.warning(
            "The following EXEs were found in /bin or /debug/bin. EXEs are not valid distribution targets.",
            exes,
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_exports_of_dlls(dlls: Sequence[Path], inspector: BinaryInspector, log: DiagnosticLog) -> LintStatus:
    dlls_with_no_exports = [dll for dll in dlls if not inspector.has_exports(dll)]

    if dlls_with_no_exports:
        log.warning("The following DLLs have no exports:", dlls_with_no_exports)
        log.warning("DLLs without any exports are likely a bug in the build script.")
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_uwp_bit_of_dlls(
    expected_system_name: str, dlls: Sequence[Path], inspector: BinaryInspector, log: DiagnosticLog
) -> LintStatus:
    if expected_system_name != WINDOWS_STORE:
        return LintStatus.SUCCESS

    dlls_with_improper_uwp_bit = [dll for dll in dlls if not inspector.has_app_container_bit(dll)]

    if dlls_with_improper_uwp_bit:
        log.warning("The following DLLs do not have the App Container bit set:", dlls_with_improper_uwp_bit)
        log.warning("This bit is required for Windows Store apps.")
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def _print_invalid_architecture_files(
    expected_architecture: str, binaries: list[FileAndArch], log: DiagnosticLog
) -> None:
    log.warning("The following files were built for an incorrect architecture:")
    for b in binaries:
        log.info(f"Expected {expected_architecture}, but was: {b.actual_arch}", [b.file])


def check_dll_architecture(
    expected_architecture: str, dlls: Sequence[Path], inspector: BinaryInspector, log: DiagnosticLog
) -> LintStatus:
    binaries_with_invalid_architecture: list[FileAndArch] = []

    for dll in dlls:
        actual_architecture = inspector.dll_architecture(dll)
        if actual_architecture != expected_architecture:
            binaries_with_invalid_architecture.append(FileAndArch(dll, actual_architecture))

    if binaries_with_invalid_architecture:
        _print_invalid_architecture_files(expected_architecture, binaries_with_invalid_architecture, log)
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_lib_architecture(
    expected_architecture: str, libs: Sequence[Path], inspector: BinaryInspector, log: DiagnosticLog
) -> LintStatus:
    """Compare each library's machine type with the target architecture.

    Libraries that report no machine type at all are skipped. A library that
    mixes machine types raises ``InconsistentArchiveError``.
    """
    binaries_with_invalid_architecture: list[FileAndArch] = []

    for lib in libs:
        actual_architecture = inspector.lib_architecture(lib)
        if actual_architecture is None:
            logger.debug(f"No machine type found in {lib}; skipping architecture check")
            continue
        if actual_architecture != expected_architecture:
            binaries_with_invalid_architecture.append(FileAndArch(lib, actual_architecture))

    if binaries_with_invalid_architecture:
        _print_invalid_architecture_files(expected_architecture, binaries_with_invalid_architecture, log)
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_no_dlls_present(dlls: Sequence[Path], log: DiagnosticLog) -> LintStatus:
    if not dlls:
        return LintStatus.SUCCESS

    log.warning("DLLs should not be present in a static build, but the following DLLs were found:", dlls)
    return LintStatus.ERROR_DETECTED


def check_matching_debug_and_release_binaries(
    debug_binaries: Sequence[Path], release_binaries: Sequence[Path], log: DiagnosticLog
) -> LintStatus:
    debug_count = len(debug_binaries)
    release_count = len(release_binaries)
    if debug_count == release_count:
        return LintStatus.SUCCESS

    log.warning(
        f"Mismatching number of debug and release binaries. "
        f"Found {debug_count} for debug but {release_count} for release."
    )
    log.info("Debug binaries", debug_binaries)
    log.info("Release binaries", release_binaries)

    if debug_count == 0:
        log.warning("Debug binaries were not found")
    if release_count == 0:
        log.warning("Release binaries were not found")

    return LintStatus.ERROR_DETECTED


def check_lib_files_are_available_if_dlls_are_available(
    lib_count: int, dll_count: int, lib_dir: Path, log: DiagnosticLog
) -> LintStatus:
    if lib_count == 0 and dll_count != 0:
        log.warning(f"Import libs were not present in {lib_dir.as_posix()}", [lib_dir])
        log.warning(
            "If this is intended, add the following line in the portfile:\n"
            f"    SET({BuildPolicy.DLLS_WITHOUT_LIBS.recipe_variable} enabled)"
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_bin_folders_are_not_present_in_static_build(package_dir: Path, log: DiagnosticLog) -> LintStatus:
    bin_dir = package_dir / "bin"
    debug_bin_dir = package_dir / "debug" / "bin"

    if not bin_dir.exists() and not debug_bin_dir.exists():
        return LintStatus.SUCCESS

    if bin_dir.exists():
        log.warning(
            f"There should be no bin\\ directory in a static build, but {bin_dir.as_posix()} is present.",
            [bin_dir],
        )
    if debug_bin_dir.exists():
        log.warning(
            f"There should be no debug\\bin\\ directory in a static build, but {debug_bin_dir.as_posix()} is present.",
            [debug_bin_dir],
        )

    log.warning(
        "If the creation of bin\\ and/or debug\\bin\\ cannot be disabled, use this in the portfile to remove them\n"
        "\n"
        "    if(VCPKG_LIBRARY_LINKAGE STREQUAL static)\n"
        "        file(REMOVE_RECURSE ${CURRENT_PACKAGES_DIR}/bin ${CURRENT_PACKAGES_DIR}/debug/bin)\n"
        "    endif()"
    )
    return LintStatus.ERROR_DETECTED


def check_no_empty_folders(directory: Path, log: DiagnosticLog) -> LintStatus:
    empty_directories = get_files_recursive(directory, is_empty_directory)

    if empty_directories:
        log.warning(f"There should be no empty directories in {directory.as_posix()}")
        log.info("The following empty directories were found:", empty_directories)
        log.warning(
            "If a directory should be populated but is not, this might indicate an error in the portfile.\n"
            "If the directories are not needed and their creation cannot be disabled, use something like this in "
            "the portfile to remove them:\n"
            "\n"
            "    file(REMOVE_RECURSE ${CURRENT_PACKAGES_DIR}/a/dir ${CURRENT_PACKAGES_DIR}/some/other/dir)"
        )
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_crt_linkage_of_libs(
    expected_build_type: BuildType, libs: Sequence[Path], inspector: BinaryInspector, log: DiagnosticLog
) -> LintStatus:
    bad_build_types = [build_type for build_type in BuildType if build_type != expected_build_type]

    libs_with_invalid_crt: list[BuildTypeAndFile] = []
    for lib in libs:
        bad_build_type = inspector.find_crt_linkage(lib, bad_build_types)
        if bad_build_type is not None:
            libs_with_invalid_crt.append(BuildTypeAndFile(lib, bad_build_type))

    if libs_with_invalid_crt:
        log.warning(f"Expected {expected_build_type} crt linkage, but the following libs had invalid crt linkage:")
        for btf in libs_with_invalid_crt:
            log.info(f"Found {btf.build_type} crt linkage in:", [btf.file])
        log.warning("To inspect the lib files, use:\n    dumpbin.exe /directives mylibfile.lib")
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_outdated_crt_linkage_of_dlls(
    dlls: Sequence[Path], inspector: BinaryInspector, toolset_version: str | None, log: DiagnosticLog
) -> LintStatus:
    outdated_crts = get_outdated_dynamic_crts(toolset_version)

    dlls_with_outdated_crt: list[OutdatedDynamicCrtAndFile] = []
    for dll in dlls:
        outdated_crt = inspector.find_outdated_runtime(dll, outdated_crts)
        if outdated_crt is not None:
            dlls_with_outdated_crt.append(OutdatedDynamicCrtAndFile(dll, outdated_crt))

    if dlls_with_outdated_crt:
        log.warning("Detected outdated dynamic CRT in the following files:")
        for d in dlls_with_outdated_crt:
            log.info(f"Depends on {d.outdated_crt.name}:", [d.file])
        log.warning("To inspect the dll files, use:\n    dumpbin.exe /dependents mydllfile.dll")
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS


def check_no_files_in_dir(directory: Path, log: DiagnosticLog) -> LintStatus:
    allowed = {name.lower() for name in ALLOWED_CONTROL_FILES}
    misplaced_files = get_files_non_recursive(
        directory, lambda path: not path.is_dir() and path.name.lower() not in allowed
    )

    if misplaced_files:
        log.warning(f"The following files are placed in\n{directory.as_posix()}: ", misplaced_files)
        log.warning("Files cannot be present in those directories.")
        return LintStatus.ERROR_DETECTED
    return LintStatus.SUCCESS
