ERRORS = {
  "E_FILE_MISSING": "Store file does not exist",
  "E_HEADER_TRUNCATED": "File is shorter than the 4-byte header",
  "E_HEADER_NEGATIVE": "Header record count is negative",
  "E_FRAME_INVALID": "Frame length prefix is truncated, negative or runs past end of file",
  "E_PAYLOAD_INVALID": "Payload does not decode as the expected entity kind",
  "E_COUNT_MISMATCH": "Header count disagrees with the frames found",
}

WARNINGS = {
  "W_TRAILING_BYTES": "Extra bytes after the last counted frame",
  "W_EMPTY_TEXT": "Record has an empty primary text field",
  "W_LONG_TEXT": "Record text field is unusually long",
}
