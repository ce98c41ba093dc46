from GraphBuilder import StreamGraphBuilder
from StreamGraphNavigator import StreamGraphNavigator
from Confluences import checkComplexConfluences, resolveComplexConfluences
import SnapSites
import PredictionSites
import NetworkRestriction
from Failures import GraphExtractionError, TopologyError
from RunContext import STREAMS_RASTER, DIRECTIONS_RASTER, STREAMS_VECTOR, EDGES, SITES, ORIGINAL_SUFFIX

class SSNDataCreator (object):
    """ Runs the network preparation stages against one RunContext.

    Stage order: deriveStreams, checkComplConfluences / correctComplConfluences, calcEdges,
    calcSites, then optionally calcPredictionSites and restrictNetwork. Each stage reads the
    maps written by the ones before it. """

    def __init__(self, context):
        self.context = context

    def deriveStreams (self, minStreamLength = 0, clean = True):
        """ Build the raw stream graph 'streams_v' from the rasters 'streams_r' and 'dirs'.

        :param minStreamLength: Source segments shorter than this (map units) are removed when clean is set.
        :param clean: Remove short source segments and merge the nodes this leaves behind. """
        streams = self.context.getMap(STREAMS_RASTER, "Did you import the stream raster?")
        dirs = self.context.getMap(DIRECTIONS_RASTER, "Did you import the flow direction raster?")
        if streams.geotransform is not None and dirs.geotransform is not None and tuple(streams.geotransform) != tuple(dirs.geotransform):
            raise GraphExtractionError("stream and flow direction rasters are not aligned")

        if __debug__:
            print("Deriving streams ...")
        builder = StreamGraphBuilder(streams.array, dirs.array, geotransform = streams.geotransform,
            minSegmentLength = minStreamLength, clean = clean)
        return self.context.addMap(STREAMS_VECTOR, builder.build())

    def checkComplConfluences (self):
        """ Does 'streams_v' contain nodes where more than two segments join? """
        streams = self.context.getMap(STREAMS_VECTOR, "Did you run deriveStreams()?")
        complex = checkComplexConfluences(streams)
        if __debug__ and complex:
            print("There are complex confluences in the stream network. Run correctComplConfluences()")
        return complex

    def correctComplConfluences (self):
        """ Replace 'streams_v' by a graph with binary confluences only. The uncorrected graph is kept as 'streams_v_o'. """
        streams = self.context.getMap(STREAMS_VECTOR, "Did you run deriveStreams()?")
        corrected = resolveComplexConfluences(streams)
        self.context.addMap(STREAMS_VECTOR + ORIGINAL_SUFFIX, streams)
        return self.context.addMap(STREAMS_VECTOR, corrected)

    def calcEdges (self):
        """ Create 'edges' from 'streams_v' with netID, rid and upDist. """
        streams = self.context.getMap(STREAMS_VECTOR, "Did you run deriveStreams()?")
        if checkComplexConfluences(streams):
            raise TopologyError("'" + STREAMS_VECTOR + "' contains complex confluences. Did you run correctComplConfluences()?")

        if __debug__:
            print("Calculating edges ...")
        edges = streams.copy()
        navigator = StreamGraphNavigator(edges, debug = __debug__)
        navigator.assignNetworkIDs()
        navigator.calcUpstreamDistances()
        #a backup of earlier edges is stale now
        self.context.removeMap(EDGES + ORIGINAL_SUFFIX)
        return self.context.addMap(EDGES, edges)

    def calcSites (self, locidColumn = None, pidColumn = None, predictions = None, maxdist = None):
        """ Snap 'sites' and optional prediction maps to the edges. See SnapSites.calcSites. """
        return SnapSites.calcSites(self.context, locidColumn = locidColumn, pidColumn = pidColumn, predictions = predictions, maxdist = maxdist)

    def calcPredictionSites (self, predictions = PredictionSites.DEFAULT_PREDICTIONS, dist = None, nsites = None, netIDs = None):
        """ See PredictionSites.calcPredictionSites. """
        return PredictionSites.calcPredictionSites(self.context, predictions = predictions, dist = dist, nsites = nsites, netIDs = netIDs)

    def restrictNetwork (self, sites = (SITES,), keepNetIDs = None, deleteNetIDs = None, keep = True, filename = EDGES + ORIGINAL_SUFFIX):
        """ See NetworkRestriction.restrictNetwork. """
        return NetworkRestriction.restrictNetwork(self.context, sites = sites, keepNetIDs = keepNetIDs, deleteNetIDs = deleteNetIDs, keep = keep, filename = filename)

    def getWarnings (self):
        return self.context.warningLog.getWarnings()
