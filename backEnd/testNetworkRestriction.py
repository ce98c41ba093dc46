import unittest
import WarningLog
from RunContext import RunContext
from StreamGraph import StreamGraph
from StreamGraphNavigator import StreamGraphNavigator
from SiteLayer import SiteLayer, SitePoint
from SnapSites import prepareSites
from NetworkRestriction import getSiteNetIDs, restrictNetwork
from Failures import PrerequisiteError, ArgumentError

def buildContext ():
    """ Four straight networks at x = 0, 10, 20, 30 and sites next to networks 1 and 3. """
    streamGraph = StreamGraph()
    for i in range(4):
        x = i * 10
        top = streamGraph.addNode((x, 10))
        bottom = streamGraph.addNode((x, 0))
        streamGraph.addSegment(top, bottom, [(x, 10), (x, 0)])
    navigator = StreamGraphNavigator(streamGraph)
    navigator.assignNetworkIDs()
    navigator.calcUpstreamDistances()

    context = RunContext()
    context.addMap("edges", streamGraph)
    context.addMap("sites_o", SiteLayer("sites_o", [SitePoint(1, (1,5)), SitePoint(2, (21,5))]))
    prepareSites(context, "sites")
    return context

class NetworkRestrictionTests (unittest.TestCase):

    def test_siteNetIDs (self):
        self.assertEqual(getSiteNetIDs(buildContext(), ["sites"]), {1, 3})

    def test_restrictToSites (self):
        context = buildContext()
        edges = restrictNetwork(context)
        self.assertEqual(edges.getNetIDs(), [1, 3])
        self.assertIs(context.getMap("edges"), edges)
        self.assertEqual(context.getMap("edges_o").getNetIDs(), [1, 2, 3, 4])

    def test_keepNetIDs (self):
        context = buildContext()
        edges = restrictNetwork(context, keepNetIDs = {3}, deleteNetIDs = [3])
        self.assertEqual(edges.getNetIDs(), [3])
        self.assertEqual(len(context.getMap("edges_o").segments), 4)

    def test_deleteNetIDs (self):
        edges = restrictNetwork(buildContext(), deleteNetIDs = [1])
        self.assertEqual(edges.getNetIDs(), [3])

    def test_attributesKept (self):
        edges = restrictNetwork(buildContext(), keepNetIDs = [2])
        segment = edges.segments[2]
        self.assertEqual((segment.rid, segment.netID, segment.upDist), (1, 2, 0))

    def test_withoutKeep (self):
        context = buildContext()
        restrictNetwork(context, keep = False)
        self.assertFalse(context.hasMap("edges_o"))

    def test_customFilename (self):
        context = buildContext()
        restrictNetwork(context, filename = "edges_all")
        self.assertEqual(len(context.getMap("edges_all").segments), 4)

    def test_filenameEdges (self):
        with self.assertRaises(ArgumentError):
            restrictNetwork(buildContext(), filename = "edges")

    def test_emptyResult (self):
        context = buildContext()
        edges = restrictNetwork(context, keepNetIDs = [])
        self.assertEqual(len(edges.segments), 0)
        self.assertEqual(len(context.warningLog.getWarnings(WarningLog.EMPTY_NETWORK_WARNING)), 1)

    def test_missingSites (self):
        context = buildContext()
        with self.assertRaises(PrerequisiteError) as error:
            restrictNetwork(context, sites = ["preds"])
        self.assertEqual(error.exception.mapName, "preds")
        self.assertFalse(context.hasMap("edges_o"))

    def test_repeatedRestrictionKeepsBackup (self):
        context = buildContext()
        restrictNetwork(context)
        edges = restrictNetwork(context, keepNetIDs = [3])
        self.assertEqual(edges.getNetIDs(), [3])
        self.assertEqual(context.getMap("edges_o").getNetIDs(), [1, 2, 3, 4])
