import Helpers
import WarningLog
from Failures import ArgumentError
from SiteLayer import SiteLayer, SitePoint
from SnapSites import checkEdgeAttributes, attachEdgeAttributes
from RunContext import EDGES, ORIGINAL_SUFFIX

DEFAULT_PREDICTIONS = "preds"

def placeSitesAlongEdges (segments, spacing):
    """ Place points every spacing map units along the segments, in the given order.

    Each segment is walked from its upstream end. The distance left over at the end of a segment
    carries into the next segment of the same network, so a network of total length L gets about
    L / spacing points. Every network starts with a point at the upstream end of its first segment.
    The remainder at the end of a network is left without a point.

    :return: A list of (SitePoint, segment) tuples. cats count from 1. """
    placed = []
    netID = None
    offset = 0.0
    for segment in segments:
        if segment.netID != netID:
            netID = segment.netID
            offset = 0.0
        while offset < segment.length:
            site = SitePoint(len(placed) + 1, segment.getPointOnSegment(offset))
            placed.append((site, segment))
            offset += spacing
        offset -= segment.length
    return placed

def calcPredictionSites (context, predictions = DEFAULT_PREDICTIONS, dist = None, nsites = None, netIDs = None):
    """ Create evenly spaced prediction sites along the edges.

    The sites are stored as '<predictions>_o' and, with netID, rid, upDist and ratio, as predictions.

    :param dist: Distance between sites in map units.
    :param nsites: Approximate number of sites. Only used when dist is not given, dist is then
        the total edge length divided by nsites. The resulting count can differ from nsites
        because every network starts with a site and the remainder of each network is dropped.
    :param netIDs: Only place sites on these networks.

    :return: The prepared SiteLayer. """
    edges = context.getMap(EDGES, "Did you run calcEdges()?")
    checkEdgeAttributes(edges)

    if dist is None and nsites is None:
        raise ArgumentError("dist", "either dist or nsites must be given")
    if dist is not None and dist <= 0:
        raise ArgumentError("dist", "must be positive")
    if nsites is not None and nsites <= 0:
        raise ArgumentError("nsites", "must be positive")
    if predictions.endswith(ORIGINAL_SUFFIX):
        raise ArgumentError("predictions", "must not end with '" + ORIGINAL_SUFFIX + "'")

    segments = sorted(edges.segments.values(), key=lambda segment: segment.rid)
    if netIDs is not None:
        netIDs = set(netIDs)
        missing = sorted(netIDs - set(edges.getNetIDs()))
        if len(missing) > 0:
            raise ArgumentError("netIDs", "no networks with netID " + Helpers.formatList(missing))
        segments = [segment for segment in segments if segment.netID in netIDs]

    estimated = dist is None
    if estimated:
        totalLength = sum(segment.length for segment in segments)
        if totalLength <= 0:
            raise ArgumentError("nsites", "the selected edges have no length")
        dist = totalLength / nsites
        if __debug__:
            print("Distance between prediction sites: " + str(round(dist, 3)) + " " + context.getMapUnits())

    placed = placeSitesAlongEdges(segments, dist)
    for site, segment in placed:
        site.pid = site.cat
        site.locID = site.cat

    originalName = predictions + ORIGINAL_SUFFIX
    context.addMap(originalName, SiteLayer(originalName, [site for site, segment in placed]))

    if estimated and len(placed) != nsites:
        message = str(len(placed)) + " prediction sites were created instead of the requested " + str(nsites) + "."
        context.warningLog.addWarning(WarningLog.LOW_PRIORITY, WarningLog.PREDICTION_COUNT_WARNING, predictions, message, count = len(placed), threshold = nsites)

    siteLayer = SiteLayer(predictions)
    for site, segment in placed:
        newSite = site.copy()
        newSite.catEdge = segment.cat
        newSite.dist = 0.0
        siteLayer.sites.append(newSite)
    attachEdgeAttributes(siteLayer, edges)
    for site in siteLayer.sites:
        site.catEdge = None

    return context.addMap(predictions, siteLayer)
