from .escaping import decode, decode_record, encode, encode_record

__all__ = ["decode", "decode_record", "encode", "encode_record"]
