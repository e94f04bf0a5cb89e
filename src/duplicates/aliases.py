from duplicates.core.models import HashAlgorithmName, KeepPolicy

HASH_ALIASES = {name.value: name for name in HashAlgorithmName}

HASH_CHOICES = list(HASH_ALIASES.keys())

HASH_HELP_TEXT = (
    "Fingerprint function used to compare file contents:\n"
    "  xxh64  : xxHash64, 8-byte fingerprint\n"
    "  xxh128 : XXH3 128-bit, 16-byte fingerprint (default)\n"
    "  md5    : MD5, 16-byte fingerprint\n"
    "  sha256 : SHA-256, 32-byte fingerprint (slowest)\n"
)

KEEP_ALIASES = {
    "lexicographic": KeepPolicy.LEXICOGRAPHIC,
    "shortest-path": KeepPolicy.SHORTEST_PATH,
    "shortest-filename": KeepPolicy.SHORTEST_FILENAME,
    "first-seen": KeepPolicy.FIRST_SEEN,
}

KEEP_CHOICES = list(KEEP_ALIASES.keys())

KEEP_HELP_TEXT = (
    "Which file of each duplicate group is kept by --delete:\n"
    "  lexicographic     : smallest path in sort order (default)\n"
    "  shortest-path     : file closest to the root\n"
    "  shortest-filename : file with the shortest name\n"
    "  first-seen        : first file hashed (differs between runs)\n"
)

EPILOG_TEXT = """
Examples:
  Find duplicates in the Downloads folder
  %(prog)s -i ~/Downloads

  Only JPEG files of at least 500KB, using 4 workers
  %(prog)s -i ~/Downloads -m 500KB -n '*.jpg' -w 4

  Regular expression on the file name, one thread (for debugging)
  %(prog)s -i ~/Photos -n '^IMG_\\d+' --regex --single-thread

  Move redundant copies to trash without a confirmation prompt (for scripts)
  %(prog)s -i ~/Downloads --delete --force --no-progress > ~/Downloads/report.txt
"""
