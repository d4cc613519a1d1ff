"""Photo Sorter: copy new photos into year folders as they arrive.

Watches a source folder for new files and copies each one, exactly
once, into ``<target>/<YYYY>/`` based on its modification time.
"""

__version__ = "1.0.0"
__app_name__ = "Photo Sorter"
