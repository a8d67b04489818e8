"""
Constants and configuration values for crosswalk-android.

This module contains the release server layout, archive layout, project
layout, timeouts, and other constants used throughout the application.
"""

APP_NAME = "crosswalk-android"

# Release server
RELEASE_SERVER_URL = "https://download.01.org/crosswalk/releases/crosswalk/android/"

# Release channels in priority order; fallback search walks this tuple left to right.
CHANNELS = ("stable", "beta", "canary")
DEFAULT_CHANNEL = CHANNELS[0]

# Version directory anchors in the channel index page, e.g. <a href="14.43.343.17/">
VERSION_DIR_PATTERN = r'href="(\d+(?:\.\d+)+)/"'

# Network timeouts (in seconds)
RELEASE_INDEX_TIMEOUT = 30

# Download and retry settings
DEFAULT_CONNECT_RETRIES = 5
DEFAULT_BACKOFF_FACTOR = 0.3
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_CHUNK_SIZE = 8192
RETRY_STATUS_FORCELIST = (408, 429, 500, 502, 503, 504)

# Release archives
ARCHIVE_PREFIX = "crosswalk"
ZIP_EXTENSION = ".zip"
MIN_SUPPORTED_MAJOR = 8
MAX_VALIDATED_MAJOR = 12

# Paths inside the archive root entry
ARCHIVE_CORE_LIBRARY_DIR = "xwalk_core_library/"
ARCHIVE_LEGACY_RUNTIME_JAR = "template/libs/xwalk_runtime_java.jar"
ARCHIVE_APP_RUNTIME_JAR = "template/libs/xwalk_app_runtime_java.jar"
ARCHIVE_RES_DIR = "template/res/"
ARCHIVE_TEMPLATE_LIBS_DIR = "template/libs"

# Project layout
CORE_LIBRARY_DIR_NAME = "xwalk_core_library"
PROJECT_LIBS_DIR_NAME = "libs"
PROJECT_RES_DIR_NAME = "res"
PROJECT_BIN_DIR_NAME = "bin"
PROJECT_ASSETS_DIR_NAME = "assets"
PROJECT_WWW_DIR_NAME = "www"
PACKAGE_DIR_NAME = "pkg"

# Build artifacts
APK_EXTENSION = ".apk"
RELEASE_APK_PATTERN = "*-release-unsigned.apk"
DEBUG_APK_PATTERN = "*-debug.apk"
UNALIGNED_APK_PATTERN = "*-debug-unaligned.apk"

# Variant enable flag: read + execute bits for user, group and other
VARIANT_ENABLE_BITS = 0o555

# Build output progress tags, e.g. "    [javac] Compiling ..."
PROGRESS_TAG_SCAN_CHARS = 7
PROGRESS_TAG_MAX_LENGTH = 14

# Project generation
MIN_API_LEVEL = 21
TEMPLATE_FILES = (
    "AndroidManifest.xml",
    "build.xml",
    "project.properties",
)
MAIN_ACTIVITY_TEMPLATE = "MainActivity.java"

# Logging configuration
LOGGER_NAME = "crosswalk_android"
LOG_FILE_NAME = "crosswalk-android.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Configuration file
CONFIG_FILE_NAME = "crosswalk-android.yaml"
DOWNLOADS_DIR_NAME = "downloads"

# Environment variable names
LOG_LEVEL_ENV_VAR = "CROSSWALK_ANDROID_LOG_LEVEL"
SDK_ROOT_ENV_VARS = ("ANDROID_SDK_ROOT", "ANDROID_HOME")
