"""Centralized user-facing text for Stylepress."""

from __future__ import annotations


class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "Stylepress – compile and cache CSS, LESS and SCSS stylesheets."
    HELP_BUILD_FILES = "Stylesheet files to compile, in output order."
    HELP_BUILD_OUTPUT = "Write the compiled stylesheet to this file instead of stdout."
    HELP_LESSIFY = "Run every stylesheet through the LESS compiler."
    HELP_SCSSIFY = "Run every stylesheet through the SCSS compiler."
    HELP_WEBROOT = "Public root directory used to resolve url() references."
    HELP_SUB_FOLDER = "Site-relative prefix prepended to rewritten url() paths."
    HELP_VERBOSE = "Log cache and compiler activity."
    HELP_CHECK_FILE = "Stylesheet whose cached build should be checked."
    HELP_CACHE_CLEAR = "Remove every cached stylesheet build."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_WEBROOT = "Persist the default webroot."
    HELP_SET_SUB_FOLDER = "Persist the default site-relative prefix."
    HELP_SET_CACHE_DIR = "Persist the cache directory."
    HELP_SET_LESSIFY = "Persist whether all stylesheets go through LESS (true/false)."
    HELP_SET_SCSSIFY = "Persist whether all stylesheets go through SCSS (true/false)."
    HELP_SET_MAX_IMPORT_DEPTH = "Persist the maximum nesting depth for CSS @import inlining."

    ERROR_LESS_COMPILER = "Error in LESS compiler for {path}: {reason}"
    ERROR_SCSS_COMPILER = "Error in SCSS compiler for {path}: {reason}"
    ERROR_URL_ABOVE_WEBROOT = (
        "Error in stylesheet {path}. The following URL goes above webroot: {url}"
    )
    ERROR_IMPORT_TOO_DEEP = (
        "Nested @import depth exceeded {limit} while inlining {path} (chain: {chain})."
    )
    ERROR_SOURCE_UNDECODABLE = "Stylesheet {path} is not valid UTF-8: {reason}"
    ERROR_NO_FILES = "No stylesheet files were requested."
    ERROR_FILE_NOT_FOUND = "Stylesheet does not exist: {path}"
    ERROR_FILE_OUTSIDE_WEBROOT = "Stylesheet is outside the webroot: {path}"
    ERROR_EXTENSION_UNSUPPORTED = "Unsupported stylesheet extension: {path}"
    ERROR_OPTION_INVALID = "Invalid value for option {name}: {value}"
    ERROR_BOOLEAN_INVALID = "Invalid boolean value: {value}"
    ERROR_CONFIG_JSON_INVALID = "Config payload must be a JSON object."
    ERROR_CONFIG_VALUE_INVALID = "Invalid config value for {field}."
    ERROR_DEPTH_NEGATIVE = "Maximum import depth must be >= 1"

    INFO_BUILD_ENTRY = "{status} {path} ({dialect})"
    INFO_BUILD_WRITTEN = "Compiled stylesheet written to {path}."
    INFO_CACHE_FRESH = "Cache for {path} is up to date."
    INFO_CACHE_STALE = "Cache for {path} is missing or stale."
    INFO_CACHE_EMPTY = "No cached stylesheet builds found."
    INFO_CACHE_CLEARED = "Removed {count} cached build{plural}."
    INFO_CONFIG_UPDATED = "Configuration updated."
    INFO_CONFIG_SUMMARY = (
        "Webroot: {webroot}\n"
        "Sub folder: {sub_folder}\n"
        "Cache directory: {cache_dir}\n"
        "Lessify all CSS: {lessify}\n"
        "Scssify all CSS: {scssify}\n"
        "Max import depth: {depth}"
    )

    TABLE_CACHE_TITLE = "Cached stylesheet builds"
    TABLE_HEADER_CACHE_FILE = "Cache file"
    TABLE_HEADER_KIND = "Kind"
    TABLE_HEADER_DEPENDENCIES = "Dependencies"
    TABLE_HEADER_SIZE = "Size"
