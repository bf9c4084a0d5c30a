from .sources import DataSource, KeySupplier, key_stream, key_supplier, read_word_list

__all__ = ["DataSource", "KeySupplier", "key_stream", "key_supplier", "read_word_list"]
