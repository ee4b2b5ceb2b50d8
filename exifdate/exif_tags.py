# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF tag definitions

Only the date/time tags that can be edited in place are listed here,
together with the two pointer tags needed to reach the Exif and GPS
sub-directories.

Copyright 2025 DNAi inc.
"""

# IFD0 (Image) tags
DATE_TIME = 0x0132
EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825

# Exif IFD tags
DATE_TIME_ORIGINAL = 0x9003
DATE_TIME_DIGITIZED = 0x9004

# GPS IFD tags
GPS_TIME_STAMP = 0x0007
GPS_DATE_STAMP = 0x001D

# Directory names as exposed in field descriptors
IFD_0TH = "0th"
IFD_EXIF = "Exif"
IFD_GPS = "GPS"

# Pointer tag -> name of the directory it leads to
SUBIFD_POINTERS = {
    EXIF_IFD_POINTER: IFD_EXIF,
    GPS_IFD_POINTER: IFD_GPS,
}

# Editable tags per directory: tag -> (name, label, field type).
# Dict order is the order fields are reported in.
DATE_TAGS = {
    IFD_0TH: {
        DATE_TIME: ("DateTime", "Image DateTime (0th IFD)", "datetime"),
    },
    IFD_EXIF: {
        DATE_TIME_ORIGINAL: ("DateTimeOriginal", "DateTimeOriginal (Exif IFD)", "datetime"),
        DATE_TIME_DIGITIZED: ("DateTimeDigitized", "DateTimeDigitized (Exif IFD)", "datetime"),
    },
    IFD_GPS: {
        GPS_DATE_STAMP: ("GPSDateStamp", "GPSDateStamp (GPS IFD)", "date"),
        GPS_TIME_STAMP: ("GPSTimeStamp", "GPSTimeStamp (GPS IFD)", "time"),
    },
}

# Fields whose stored value is UTC rather than civil time
UTC_FIELDS = {"GPSDateStamp", "GPSTimeStamp"}

# GPS date and time describe one instant and are re-encoded together
GPS_PARTNERS = {
    "GPSDateStamp": "GPSTimeStamp",
    "GPSTimeStamp": "GPSDateStamp",
}
