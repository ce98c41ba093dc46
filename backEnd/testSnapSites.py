import unittest
import WarningLog
from RunContext import RunContext
from StreamGraph import StreamGraph
from StreamGraphNavigator import StreamGraphNavigator
from SiteLayer import SiteLayer, SitePoint
from SiteIDManager import SiteIDManager
from SnapSites import snapPoint, prepareSites, calcSites
from Failures import PrerequisiteError, ArgumentError

def buildEdges ():
    """ Network 1: cat 1 (0,20)->(0,10) draining into cat 2 (0,10)->(0,0). Network 2: cat 3 (10,20)->(10,0). """
    streamGraph = StreamGraph()
    node1 = streamGraph.addNode((0,20))
    node2 = streamGraph.addNode((0,10))
    node3 = streamGraph.addNode((0,0))
    streamGraph.addSegment(node1, node2, [(0,20), (0,10)])
    streamGraph.addSegment(node2, node3, [(0,10), (0,0)])
    node4 = streamGraph.addNode((10,20))
    node5 = streamGraph.addNode((10,0))
    streamGraph.addSegment(node4, node5, [(10,20), (10,0)])

    navigator = StreamGraphNavigator(streamGraph)
    navigator.assignNetworkIDs()
    navigator.calcUpstreamDistances()
    return streamGraph

def buildSites (name = "sites_o"):
    sites = [
        SitePoint(1, (1,17), {"site_id":"A", "sample":"x1"}),
        SitePoint(2, (9,5), {"site_id":"B", "sample":"x2"}),
        SitePoint(3, (-4,3), {"site_id":"A", "sample":"x3"}),
    ]
    return SiteLayer(name, sites, ["site_id", "sample"])

def buildContext ():
    context = RunContext(mapUnits = "m")
    context.addMap("edges", buildEdges())
    context.addMap("sites_o", buildSites())
    return context

class SnapPointTests (unittest.TestCase):

    def test_nearestSegment (self):
        snap = snapPoint((1,17), buildEdges())
        self.assertEqual(snap.segment.cat, 1)
        self.assertEqual(snap.point, (0,17))
        self.assertEqual(snap.snapDistance, 1)
        self.assertEqual(snap.distAlongFeature, 3)

    def test_tiePrefersLowerCat (self):
        snap = snapPoint((5,15), buildEdges())
        self.assertEqual(snap.segment.cat, 1)

    def test_tiePrefersSegmentWithLength (self):
        streamGraph = StreamGraph()
        top = streamGraph.addNode((0,0))
        bottom = streamGraph.addNode((0,-10))
        aux = streamGraph.addNode((0,0))
        streamGraph.addSegment(aux, top, [(0,0), (0,0)], length = 0.0, auxiliary = True)
        streamGraph.addSegment(top, bottom, [(0,0), (0,-10)])

        snap = snapPoint((1,0), streamGraph)
        self.assertEqual(snap.segment.cat, 2)

    def test_emptyGraph (self):
        self.assertIsNone(snapPoint((0,0), StreamGraph()))

class PrepareSitesTests (unittest.TestCase):

    def test_attributes (self):
        context = buildContext()
        sites = prepareSites(context, "sites")
        edges = context.getMap("edges")

        self.assertIs(context.getMap("sites"), sites)
        self.assertEqual(len(sites), 3)
        first = sites.sites[0]
        self.assertEqual(first.position, (0,17))
        self.assertEqual(first.originalPosition, (1,17))
        self.assertEqual(first.dist, 1)
        self.assertEqual((first.netID, first.rid, first.strEdge), (1, 1, 1))
        self.assertEqual(first.distalong, 3)
        #17 map units along the flow path to the outlet at (0,0)
        self.assertEqual(first.upDist, 17)
        self.assertAlmostEqual(first.ratio, 0.7)

        for site in sites.sites:
            self.assertIsNone(site.catEdge)
            self.assertGreaterEqual(site.ratio, 0)
            self.assertLessEqual(site.ratio, 1)
            segment = [s for s in edges.segments.values() if s.rid == site.rid][0]
            self.assertEqual(site.upDist, round(segment.upDist + segment.length - site.distalong, 2))

    def test_upDistIsFlowDistance (self):
        #two tributaries joining at (0,10), draining to the outlet at (0,0)
        streamGraph = StreamGraph()
        north = streamGraph.addNode((0,20))
        east = streamGraph.addNode((10,10))
        junction = streamGraph.addNode((0,10))
        outlet = streamGraph.addNode((0,0))
        streamGraph.addSegment(north, junction, [(0,20), (0,10)])
        streamGraph.addSegment(east, junction, [(10,10), (0,10)])
        streamGraph.addSegment(junction, outlet, [(0,10), (0,0)])
        navigator = StreamGraphNavigator(streamGraph)
        navigator.assignNetworkIDs()
        navigator.calcUpstreamDistances()

        context = RunContext()
        context.addMap("edges", streamGraph)
        context.addMap("sites_o", SiteLayer("sites_o", [SitePoint(1, (1,12)), SitePoint(2, (8,11)), SitePoint(3, (0.2,9.5)), SitePoint(4, (1,4))]))
        sites = prepareSites(context, "sites")

        self.assertEqual([site.upDist for site in sites.sites], [12, 18, 9.5, 4])
        #both tributary sites lie upstream of the sites below the junction
        for upstream in sites.sites[:2]:
            for downstream in sites.sites[2:]:
                self.assertGreaterEqual(upstream.upDist, downstream.upDist)
        for site in sites.sites:
            self.assertGreaterEqual(site.upDist, 0)

    def test_record (self):
        context = buildContext()
        record = prepareSites(context, "sites").getAttributeTable()[1]
        self.assertEqual(record["site_id"], "B")
        self.assertEqual((record["NEAR_X"], record["NEAR_Y"]), (10, 5))
        self.assertEqual(record["netID"], 2)
        self.assertEqual(record["distalong"], 15)
        self.assertNotIn("cat_edge", record)

    def test_getGeoJSON (self):
        geojson = prepareSites(buildContext(), "sites").getGeoJSON()
        self.assertEqual(len(geojson["features"]), 3)
        self.assertEqual(geojson["features"][0]["geometry"]["coordinates"], [0, 17])
        self.assertEqual(geojson["features"][0]["properties"]["rid"], 1)

    def test_originalUnchanged (self):
        context = buildContext()
        prepareSites(context, "sites", maxdist = 2)
        original = context.getMap("sites_o")
        self.assertEqual(len(original), 3)
        self.assertEqual(original.sites[0].position, (1,17))
        self.assertIsNone(original.sites[0].rid)

    def test_idsDefaultToCat (self):
        sites = prepareSites(buildContext(), "sites")
        self.assertEqual([site.locID for site in sites.sites], [1, 2, 3])
        self.assertEqual([site.pid for site in sites.sites], [1, 2, 3])

    def test_idColumns (self):
        sites = prepareSites(buildContext(), "sites", locidColumn = "site_id", pidColumn = "sample")
        self.assertEqual([site.locID for site in sites.sites], [1, 2, 1])
        self.assertEqual([site.pid for site in sites.sites], [1, 2, 3])

    def test_maxdistRemovesSites (self):
        context = buildContext()
        sites = prepareSites(context, "sites", maxdist = 2)

        self.assertEqual([site.cat for site in sites.sites], [1, 2])
        warnings = context.warningLog.getWarnings(WarningLog.SNAP_DISTANCE_WARNING)
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].count, 1)
        self.assertEqual(warnings[0].threshold, 2)
        self.assertEqual(warnings[0].mapName, "sites")

    def test_maxdistNotExceeded (self):
        context = buildContext()
        sites = prepareSites(context, "sites", maxdist = 4)
        self.assertEqual(len(sites), 3)
        self.assertEqual(context.warningLog.getWarnings(), [])

    def test_maxdistZero (self):
        context = buildContext()
        context.getMap("sites_o").sites.append(SitePoint(4, (0,5)))
        sites = prepareSites(context, "sites", maxdist = 0)
        self.assertEqual(len(sites), 0)

    def test_missingColumn (self):
        context = buildContext()
        with self.assertRaises(ArgumentError) as error:
            prepareSites(context, "sites", locidColumn = "station")
        self.assertEqual(error.exception.parameter, "locidColumn")
        self.assertFalse(context.hasMap("sites"))

    def test_negativeMaxdist (self):
        with self.assertRaises(ArgumentError):
            prepareSites(buildContext(), "sites", maxdist = -1)

    def test_missingEdges (self):
        context = RunContext()
        context.addMap("sites_o", buildSites())
        with self.assertRaises(PrerequisiteError) as error:
            prepareSites(context, "sites")
        self.assertEqual(error.exception.mapName, "edges")

    def test_edgesWithoutNetworkIDs (self):
        context = buildContext()
        edges = context.getMap("edges")
        for segment in edges.segments.values():
            segment.rid = None
        with self.assertRaises(PrerequisiteError):
            prepareSites(context, "sites")

    def test_rerunDropsStaleColumns (self):
        context = buildContext()
        original = context.getMap("sites_o")
        original.columns.append("dist")
        for site in original.sites:
            site.attributes["dist"] = -1
        sites = prepareSites(context, "sites")
        self.assertNotIn("dist", sites.columns)
        self.assertEqual(sites.getAttributeTable()[0]["dist"], 1)

class CalcSitesTests (unittest.TestCase):

    def test_predictions (self):
        context = buildContext()
        context.addMap("preds_o", SiteLayer("preds_o", [SitePoint(1, (11,10))]))
        results = calcSites(context, locidColumn = "site_id", predictions = ["preds_o"])

        self.assertEqual(sorted(results), ["preds", "sites"])
        self.assertEqual(context.getMap("preds").sites[0].netID, 2)
        #preds has no site_id column, ids fall back to cat
        self.assertEqual(context.getMap("preds").sites[0].locID, 1)

    def test_missingPredictions (self):
        context = buildContext()
        with self.assertRaises(PrerequisiteError) as error:
            calcSites(context, predictions = "preds")
        self.assertEqual(error.exception.mapName, "preds_o")
        self.assertFalse(context.hasMap("sites"))

    def test_missingSites (self):
        context = RunContext()
        context.addMap("edges", buildEdges())
        with self.assertRaises(PrerequisiteError):
            calcSites(context)

class SiteIDManagerTests (unittest.TestCase):

    def test_encode (self):
        manager = SiteIDManager()
        self.assertEqual(manager.encode(["b", "a", "b", "c"]), [1, 2, 1, 3])
        self.assertEqual(manager.getID("a"), 2)
