"""Logic helpers for the `stylepress config` command."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import Config, load_config, update_config_from_json


@dataclass(slots=True)
class ConfigUpdateResult:
    webroot_set: bool = False
    sub_folder_set: bool = False
    cache_dir_set: bool = False
    lessify_set: bool = False
    scssify_set: bool = False
    max_import_depth_set: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.webroot_set,
                self.sub_folder_set,
                self.cache_dir_set,
                self.lessify_set,
                self.scssify_set,
                self.max_import_depth_set,
            )
        )


def apply_config_updates(
    *,
    webroot: str | None = None,
    sub_folder: str | None = None,
    cache_dir: str | None = None,
    lessify_all_css: bool | None = None,
    scssify_all_css: bool | None = None,
    max_import_depth: int | None = None,
) -> ConfigUpdateResult:
    """Persist every provided setting and report which ones were written."""

    payload: dict[str, object] = {}
    result = ConfigUpdateResult()
    if webroot is not None:
        payload["webroot"] = webroot
        result.webroot_set = True
    if sub_folder is not None:
        payload["sub_folder"] = sub_folder
        result.sub_folder_set = True
    if cache_dir is not None:
        payload["cache_dir"] = cache_dir
        result.cache_dir_set = True
    if lessify_all_css is not None:
        payload["lessify_all_css"] = lessify_all_css
        result.lessify_set = True
    if scssify_all_css is not None:
        payload["scssify_all_css"] = scssify_all_css
        result.scssify_set = True
    if max_import_depth is not None:
        payload["max_import_depth"] = max_import_depth
        result.max_import_depth_set = True
    if payload:
        update_config_from_json(payload)
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
