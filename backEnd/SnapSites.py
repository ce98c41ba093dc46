import collections
import Helpers
import WarningLog
from Failures import PrerequisiteError, ArgumentError
from SiteIDManager import SiteIDManager
from StreamGraph import PERSISTED_DIGITS
from RunContext import EDGES, SITES, ORIGINAL_SUFFIX

#a possible snap for a given point
Snap = collections.namedtuple('Snap', 'segment point snapDistance distAlongFeature')

#columns written while snapping. Stale copies are dropped before a map is prepared again
SNAP_COLUMNS = ["cat_edge", "str_edge", "dist", "NEAR_X", "NEAR_Y"]

def snapPoint (point, graph):
    """ Find the segment nearest to point and the projection of point on it.

    Segments are roughly sorted by the distance to their bounding box first, which lets us stop
    as soon as no remaining segment can be closer. Ties are broken by preferring segments with
    a length, then the lower cat.

    :return: A Snap, or None if the graph has no segments. """
    px = point[0]
    py = point[1]
    sortedSegments = sorted(graph.segments.values(), key=lambda segment: (Helpers.boxDist(segment.box, px, py), segment.cat))

    bestSnap = None
    bestKey = None
    for segment in sortedSegments:
        boxDistance = Helpers.boxDist(segment.box, px, py)
        if bestSnap is not None and boxDistance > bestSnap.snapDistance:
            break
        nearest, snapDistance, distAlong = segment.project(point)
        key = (snapDistance, segment.length == 0, segment.cat)
        if bestKey is None or key < bestKey:
            bestKey = key
            bestSnap = Snap(segment = segment, point = nearest, snapDistance = snapDistance, distAlongFeature = distAlong)
    return bestSnap

def checkEdgeAttributes (edges):
    """ Make sure calcEdges ran on the edges. """
    for segment in edges.segments.values():
        if segment.rid is None or segment.netID is None or segment.upDist is None:
            raise PrerequisiteError(EDGES, "Segment " + str(segment.cat) + " has no rid, netID or upDist. Did you run calcEdges()?")

def dropSnapColumns (siteLayer):
    """ Remove stale snapping columns a layer may carry from an earlier run. """
    stale = [column for column in siteLayer.columns if column in SNAP_COLUMNS]
    if len(stale) == 0:
        return
    siteLayer.columns = [column for column in siteLayer.columns if column not in SNAP_COLUMNS]
    for site in siteLayer.sites:
        for column in stale:
            site.attributes.pop(column, None)

def snapSites (siteLayer, edges):
    """ Move every site onto its nearest segment. Records dist, catEdge and the new position. """
    for site in siteLayer.sites:
        snap = snapPoint(site.position, edges)
        site.dist = snap.snapDistance
        site.catEdge = snap.segment.cat
        site.position = snap.point

def removeDistantSites (context, siteLayer, maxdist):
    """ Drop the sites that moved maxdist or more, if any site moved farther than maxdist. """
    if len(siteLayer.sites) == 0:
        return
    mdist = max(site.dist for site in siteLayer.sites)
    if __debug__:
        print("Maximum snapping distance found: " + str(round(mdist, 3)) + " " + context.getMapUnits())

    if maxdist is not None and mdist > maxdist:
        keptSites = [site for site in siteLayer.sites if site.dist < maxdist]
        numRemoved = len(siteLayer.sites) - len(keptSites)
        siteLayer.sites = keptSites
        message = "There were " + str(numRemoved) + " sites with snapping distance > maxdist (" + str(maxdist) + " " + context.getMapUnits() + "). Sites were deleted."
        context.warningLog.addWarning(WarningLog.LOW_PRIORITY, WarningLog.SNAP_DISTANCE_WARNING, siteLayer.name, message, count = numRemoved, threshold = maxdist)

def assignSiteIDs (siteLayer, locidColumn = None, pidColumn = None):
    """ Set locID and pid.

    locID comes from locidColumn (dense ints by first seen value) or the feature cat.
    pid comes from pidColumn the same way, or equals locID. """
    if locidColumn is not None:
        locIDs = SiteIDManager().encode(siteLayer.getColumnValues(locidColumn))
    else:
        locIDs = [site.cat for site in siteLayer.sites]

    if pidColumn is not None:
        pids = SiteIDManager().encode(siteLayer.getColumnValues(pidColumn))
    else:
        pids = locIDs

    for site, locID, pid in zip(siteLayer.sites, locIDs, pids):
        site.locID = locID
        site.pid = pid

def attachEdgeAttributes (siteLayer, edges):
    """ Join netID, rid and the raw stream id from the owning segment, then compute distalong, upDist and ratio.

    Sites must lie on the segment given by their catEdge. """
    for site in siteLayer.sites:
        segment = edges.segments.get(site.catEdge)
        if segment is None:
            raise PrerequisiteError(EDGES, "Segment " + str(site.catEdge) + " of site " + str(site.cat) + " is missing.")
        site.netID = segment.netID
        site.rid = segment.rid
        site.strEdge = segment.stream

        distalong = segment.project(site.position)[2]
        site.distalong = distalong
        #segment.upDist is taken at the downstream node, distalong from the upstream node
        site.upDist = round(segment.upDist + segment.length - distalong, PERSISTED_DIGITS)
        if segment.length > 0:
            site.ratio = min(1.0, max(0.0, 1 - distalong / segment.length))
        else:
            site.ratio = 1.0

def prepareSites (context, sitesMap, locidColumn = None, pidColumn = None, maxdist = None):
    """ Snap the sites of map '<sitesMap>_o' to the edges and calculate their attributes.

    The result is stored as map sitesMap. The original map is not changed.

    :param locidColumn: Column giving a unique location id. Defaults to the feature cat.
    :param pidColumn: Column separating repeated measurements. Defaults to locID.
    :param maxdist: Maximum snapping distance in map units. Sites farther away are removed.

    :return: The prepared SiteLayer. """
    edges = context.getMap(EDGES, "Did you run calcEdges()?")
    original = context.getMap(sitesMap + ORIGINAL_SUFFIX, "Did you import the sites?")
    checkEdgeAttributes(edges)
    if len(edges.segments) == 0:
        raise PrerequisiteError(EDGES, "The map contains no segments.")
    if maxdist is not None and maxdist < 0:
        raise ArgumentError("maxdist", "must not be negative")
    for parameter, column in (("locidColumn", locidColumn), ("pidColumn", pidColumn)):
        if column is not None and not original.hasColumn(column):
            raise ArgumentError(parameter, "column '" + str(column) + "' not found in '" + original.name + "'")

    if __debug__:
        print("Preparing sites '" + sitesMap + "' ...")
    siteLayer = original.copy(sitesMap)
    dropSnapColumns(siteLayer)

    if __debug__:
        print("Snapping sites to streams ...")
    snapSites(siteLayer, edges)
    removeDistantSites(context, siteLayer, maxdist)

    if __debug__:
        print("Setting pid and locID ...")
    assignSiteIDs(siteLayer, locidColumn, pidColumn)

    if __debug__:
        print("Assigning netID and rid, calculating upDist and ratio ...")
    attachEdgeAttributes(siteLayer, edges)

    #helper column, only needed for the join
    for site in siteLayer.sites:
        site.catEdge = None

    return context.addMap(sitesMap, siteLayer)

def calcSites (context, locidColumn = None, pidColumn = None, predictions = None, maxdist = None):
    """ Prepare the observation sites and, optionally, prediction sites.

    :param predictions: Name or list of names of imported prediction site maps, with or without the '_o' suffix.
        Id columns are only applied to prediction maps that have them.

    :return: A dict of map name -> prepared SiteLayer. """
    context.getMap(SITES + ORIGINAL_SUFFIX, "Did you import the sites?")
    context.getMap(EDGES, "Did you run calcEdges()?")

    predictionMaps = []
    if predictions is not None:
        if isinstance(predictions, str):
            predictions = [predictions]
        for name in predictions:
            if not isinstance(name, str):
                raise ArgumentError("predictions", "must be the names of imported prediction site maps")
            if name.endswith(ORIGINAL_SUFFIX):
                name = name[:-len(ORIGINAL_SUFFIX)]
            context.getMap(name + ORIGINAL_SUFFIX, "Did you import the prediction sites?")
            predictionMaps.append(name)

    results = {}
    results[SITES] = prepareSites(context, SITES, locidColumn, pidColumn, maxdist)
    for name in predictionMaps:
        original = context.getMap(name + ORIGINAL_SUFFIX)
        locid = locidColumn if locidColumn is not None and original.hasColumn(locidColumn) else None
        pid = pidColumn if pidColumn is not None and original.hasColumn(pidColumn) else None
        results[name] = prepareSites(context, name, locid, pid, maxdist)
    return results
