from collections import namedtuple
from Failures import PrerequisiteError
from WarningLog import WarningLog

RasterData = namedtuple('RasterData', 'array geotransform projection nodata')
""" A raster handed over by the GIS engine. geotransform follows the GDAL convention. """

#names of the maps written by the stages
STREAMS_RASTER = "streams_r"
DIRECTIONS_RASTER = "dirs"
STREAMS_VECTOR = "streams_v"
EDGES = "edges"
SITES = "sites"
ORIGINAL_SUFFIX = "_o"

DEFAULT_MAP_UNITS = "map units"

class RunContext (object):
    """ Holds the named maps of one pipeline run.

    Use it as a context manager, the maps are dropped when the block is left.
    Only one pipeline may work on a context at a time. """

    def __init__(self, workspace = None, mapUnits = None):
        self.workspace = workspace
        self.mapUnits = mapUnits
        self.maps = {}
        self.warningLog = WarningLog(workspace)

    def __enter__ (self):
        return self

    def __exit__ (self, excType, excValue, traceback):
        self.maps.clear()
        return False

    def addMap (self, name, data):
        """ Store data under name, replacing any earlier map of that name. """
        self.maps[name] = data
        return data

    def hasMap (self, name):
        return name in self.maps

    def getMap (self, name, hint = ""):
        """ Get a map by name.

        :param hint: Added to the error message, usually the stage that creates the map. """
        if name not in self.maps:
            raise PrerequisiteError(name, hint)
        return self.maps[name]

    def removeMap (self, name):
        if name in self.maps:
            del self.maps[name]

    def listMaps (self, kind = None):
        """ Names of the stored maps, optionally only those of one type. """
        return sorted(name for name, data in self.maps.items() if kind is None or isinstance(data, kind))

    def getMapUnits (self):
        """ The linear unit of the input rasters. Distances are always in this unit. """
        if self.mapUnits is None:
            return DEFAULT_MAP_UNITS
        return self.mapUnits
