"""
L0 Data — The package catalog.

Fixed, ordered list of the tools this program provisions.  Order is
build order: m4 before autoconf, autoconf before automake, and so on.
``{prefix}`` and ``{jobs}`` tokens in recipe arguments are substituted
at build time.
"""

from __future__ import annotations

from provisioner.core.models.catalog import CatalogEntry

_GNU_MIRRORS = (
    "https://ftpmirror.gnu.org",
    "https://ftp.gnu.org/gnu",
    "https://mirrors.kernel.org/gnu",
)


def _gnu(name: str, version: str, suffix: str) -> tuple[str, ...]:
    return tuple(f"{m}/{name}/{name}-{version}{suffix}" for m in _GNU_MIRRORS)


_CATALOG_DATA: list[dict] = [
    {
        "name": "m4",
        "version": "1.4.19",
        "archive_suffix": ".tar.xz",
        "candidate_urls": _gnu("m4", "1.4.19", ".tar.xz"),
        "expected_checksum": "63aede5c6d33b6d9b13511cd0be2cac046f2e70fd0a07aa9573a04a82783af96",
    },
    {
        "name": "autoconf",
        "version": "2.72",
        "archive_suffix": ".tar.xz",
        "candidate_urls": _gnu("autoconf", "2.72", ".tar.xz"),
        "expected_checksum": "ba885c1319578d6c94d46e9b0dceb4014caafe2490e437a0dbca3f270a223f5a",
    },
    {
        "name": "automake",
        "version": "1.16.5",
        "archive_suffix": ".tar.xz",
        "candidate_urls": _gnu("automake", "1.16.5", ".tar.xz"),
        "expected_checksum": "f01d58cd6d9d77fbdca9eb4bbd5ead1988228fdb73d6f7a201f5f8d6b118b469",
    },
    {
        "name": "libtool",
        "version": "2.4.7",
        "archive_suffix": ".tar.xz",
        "candidate_urls": _gnu("libtool", "2.4.7", ".tar.xz"),
        "expected_checksum": "4f7f217f057ce655ff22559ad221a0fd8ef84ad1fc5fcb6990cecc333aa1635d",
        # macOS ships an unrelated /usr/bin/libtool
        "version_command": ("libtoolize", "--version"),
    },
    {
        "name": "cmake",
        "version": "3.28.1",
        "candidate_urls": (
            "https://github.com/Kitware/CMake/releases/download/v3.28.1/cmake-3.28.1.tar.gz",
            "https://cmake.org/files/v3.28/cmake-3.28.1.tar.gz",
        ),
        "expected_checksum": "15e94f83e647f7d620a140a7a5da76349fc47a1bfed66d0f5cdee8e7344079ad",
        "configure_args": ("--parallel={jobs}", "--no-qt-gui", "--no-system-jsoncpp"),
    },
    {
        "name": "meson",
        "version": "1.3.1",
        "build_recipe": "script_installer",
        "candidate_urls": (
            "https://github.com/mesonbuild/meson/releases/download/1.3.1/meson-1.3.1.tar.gz",
            "https://files.pythonhosted.org/packages/source/m/meson/meson-1.3.1.tar.gz",
        ),
        "expected_checksum": "6020568bdede1643d4fb41e28215be38eff5d52da28ac7d125457c59e0032ad7",
        "package_dirs": ("mesonbuild",),
    },
    {
        "name": "nasm",
        "version": "2.16.03",
        "archive_suffix": ".tar.xz",
        "candidate_urls": (
            "https://www.nasm.us/pub/nasm/releasebuilds/2.16.03/nasm-2.16.03.tar.xz",
            "https://distfiles.macports.org/nasm/nasm-2.16.03.tar.xz",
        ),
        "expected_checksum": "1412a1c760bbd05db026b6c0d1657affd6631cd0a63cddb6f73cc6d4aa616148",
        "make_args": ("AR=ar", "RANLIB=ranlib"),
        "in_tree": True,
        "version_command": ("nasm", "-v"),
    },
    {
        "name": "ninja",
        "version": "1.11.1",
        "build_recipe": "bootstrap_copy",
        "candidate_urls": (
            "https://github.com/ninja-build/ninja/archive/refs/tags/v1.11.1.tar.gz",
        ),
        "expected_checksum": "31747ae633213f1eda3842686f83c2aa1412e0f5691d1c14dbbcc67fe7400cea",
    },
    {
        "name": "openssl",
        "version": "3.0.13",
        "candidate_urls": (
            "https://www.openssl.org/source/openssl-3.0.13.tar.gz",
            "https://github.com/openssl/openssl/releases/download/openssl-3.0.13/openssl-3.0.13.tar.gz",
        ),
        "expected_checksum": "88525753f79d3bec27d2fa7c66aa0b92b3aa9498dafd93d7cfa4b3780cdae313",
        "configure_script": "config",
        "configure_args": ("--openssldir={prefix}/etc/openssl",),
        "install_target": "install_sw",
        "in_tree": True,
        "version_command": ("openssl", "version"),
        # macOS ships a LibreSSL /usr/bin/openssl whose version outranks ours
        "probe_prefix_only": True,
    },
    {
        "name": "pkg-config",
        "version": "0.29.2",
        "candidate_urls": (
            "https://pkgconfig.freedesktop.org/releases/pkg-config-0.29.2.tar.gz",
            "https://distfiles.macports.org/pkgconfig/pkg-config-0.29.2.tar.gz",
        ),
        "expected_checksum": "6fc69c01688c9458a57eb9a1664c9aba372ccda420a02bf4429fe610e7e7d591",
        "configure_args": ("--with-internal-glib", "CFLAGS=-Wno-int-conversion"),
    },
]

CATALOG: tuple[CatalogEntry, ...] = tuple(
    CatalogEntry.model_validate(data) for data in _CATALOG_DATA
)

