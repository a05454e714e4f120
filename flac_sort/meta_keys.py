from __future__ import annotations

# Vorbis comment keys written by the tagger and the flattener.

TITLE = "TITLE"
ARTIST = "ARTIST"
ALBUM = "ALBUM"
ALBUMARTIST = "ALBUMARTIST"
GENRE = "GENRE"
COMPILATION = "COMPILATION"
TRACKNUMBER = "TRACKNUMBER"
TRACKTOTAL = "TRACKTOTAL"
DISCNUMBER = "DISCNUMBER"
DISCTOTAL = "DISCTOTAL"

FRONT_COVER = 3
