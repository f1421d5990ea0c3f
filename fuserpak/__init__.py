"""
# fuserpak: the packages of Fuser's custom songs.

A file format is described once, as an ordered list of fields, and the same
description is used in the two directions:

 1. unpack(): reading the binary data and building a high-level, mutable,
    representation of it. Each chunk knows how many bytes it needs to read
    from the cursor to finalize its representation.

 2. pack(): encoding the high-level representation into binary data. The
    values derived from others (counts, lengths, tags) are recomputed just
    before writing, so they always follow the edits.

The description of a field is a single serialize() taking a BinaryCursor:
reading or writing depends on the mode of the cursor. Data not touched
between unpack() and pack() is written back exactly as it was read.

Above the format ORM there are

 - fuserpak.pak: the package container and its signature file
 - fuserpak.uasset: the asset graph stored in the structured entries
 - fuserpak.fuser: the custom song itself and the session to edit it
"""
