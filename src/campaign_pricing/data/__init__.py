"""Data subpackage - packaged catalog CSVs and their loader."""
