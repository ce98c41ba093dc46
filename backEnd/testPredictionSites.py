import unittest
import WarningLog
from RunContext import RunContext
from StreamGraph import StreamGraph
from StreamGraphNavigator import StreamGraphNavigator
from PredictionSites import placeSitesAlongEdges, calcPredictionSites
from Failures import PrerequisiteError, ArgumentError

def buildEdges (lengths):
    """ One straight network per length, side by side. """
    streamGraph = StreamGraph()
    for i, length in enumerate(lengths):
        x = i * 100
        top = streamGraph.addNode((x, length))
        bottom = streamGraph.addNode((x, 0))
        streamGraph.addSegment(top, bottom, [(x, length), (x, 0)])
    navigator = StreamGraphNavigator(streamGraph)
    navigator.assignNetworkIDs()
    navigator.calcUpstreamDistances()
    return streamGraph

def buildContext (lengths):
    context = RunContext()
    context.addMap("edges", buildEdges(lengths))
    return context

class PlaceSitesTests (unittest.TestCase):

    def test_offsets (self):
        segment = buildEdges([10]).segments[1]
        placed = placeSitesAlongEdges([segment], 4)
        self.assertEqual([site.position for site, s in placed], [(0,10), (0,6), (0,2)])
        self.assertEqual([site.cat for site, s in placed], [1, 2, 3])

    def test_spacingLongerThanSegment (self):
        segment = buildEdges([10]).segments[1]
        self.assertEqual(len(placeSitesAlongEdges([segment], 50)), 1)

class PredictionSiteTests (unittest.TestCase):

    def test_dist (self):
        context = buildContext([10000])
        preds = calcPredictionSites(context, dist = 2500)

        self.assertEqual(len(preds), 4)
        self.assertIs(context.getMap("preds"), preds)
        self.assertEqual(len(context.getMap("preds_o")), 4)
        self.assertEqual([site.upDist for site in preds.sites], [10000, 7500, 5000, 2500])
        self.assertEqual([site.ratio for site in preds.sites], [1, 0.75, 0.5, 0.25])
        for site in preds.sites:
            self.assertEqual((site.netID, site.rid), (1, 0))
            self.assertEqual(site.pid, site.cat)
            self.assertEqual(site.locID, site.cat)
            self.assertIsNone(site.catEdge)
        self.assertEqual(context.warningLog.getWarnings(), [])

    def test_nsites (self):
        context = buildContext([10000])
        preds = calcPredictionSites(context, "preds2", nsites = 4)
        self.assertEqual(len(preds), 4)
        self.assertTrue(context.hasMap("preds2_o"))
        self.assertEqual(context.warningLog.getWarnings(), [])

    def test_nsitesCountDiffers (self):
        #dist is 15, every network gets its single starting site
        context = buildContext([10, 10, 10])
        preds = calcPredictionSites(context, nsites = 2)

        self.assertEqual(len(preds), 3)
        warnings = context.warningLog.getWarnings(WarningLog.PREDICTION_COUNT_WARNING)
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].count, 3)
        self.assertEqual(warnings[0].threshold, 2)

    def test_spacingCarriesAcrossReaches (self):
        #ten 1000 unit reaches in a single chain from (0,10000) to the outlet at (0,0)
        streamGraph = StreamGraph()
        nodes = [streamGraph.addNode((0, 10000 - 1000 * i)) for i in range(11)]
        for upper, lower in zip(nodes[:-1], nodes[1:]):
            streamGraph.addSegment(upper, lower, [upper.position, lower.position])
        navigator = StreamGraphNavigator(streamGraph)
        navigator.assignNetworkIDs()
        navigator.calcUpstreamDistances()
        context = RunContext()
        context.addMap("edges", streamGraph)

        preds = calcPredictionSites(context, dist = 2500)
        self.assertEqual(len(preds), 4)
        for site in preds.sites:
            self.assertEqual(site.upDist, site.position[1])
        self.assertEqual(context.warningLog.getWarnings(), [])

    def test_spacingRestartsPerNetwork (self):
        placed = placeSitesAlongEdges(sorted(buildEdges([10, 10]).segments.values(), key=lambda s: s.rid), 4)
        self.assertEqual([site.position for site, s in placed], [(0,10), (0,6), (0,2), (100,10), (100,6), (100,2)])

    def test_ridOrder (self):
        context = buildContext([10, 20])
        preds = calcPredictionSites(context, dist = 5)
        rids = [site.rid for site in preds.sites]
        self.assertEqual(rids, sorted(rids))
        self.assertEqual([site.pid for site in preds.sites], list(range(1, 7)))

    def test_netIDs (self):
        context = buildContext([10, 20, 30])
        preds = calcPredictionSites(context, dist = 10, netIDs = [3])
        self.assertEqual(len(preds), 3)
        self.assertEqual(preds.getNetIDs(), [3])

    def test_unknownNetID (self):
        with self.assertRaises(ArgumentError):
            calcPredictionSites(buildContext([10]), dist = 1, netIDs = [4])

    def test_missingDistAndNsites (self):
        with self.assertRaises(ArgumentError):
            calcPredictionSites(buildContext([10]))

    def test_nonPositive (self):
        with self.assertRaises(ArgumentError):
            calcPredictionSites(buildContext([10]), dist = 0)
        with self.assertRaises(ArgumentError):
            calcPredictionSites(buildContext([10]), nsites = -2)

    def test_reservedName (self):
        with self.assertRaises(ArgumentError):
            calcPredictionSites(buildContext([10]), "preds_o", dist = 1)

    def test_missingEdges (self):
        with self.assertRaises(PrerequisiteError):
            calcPredictionSites(RunContext(), dist = 1)
