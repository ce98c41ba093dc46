import unittest
import numpy as np
from RunContext import RunContext, RasterData
from GraphBuilder import DEFAULT_GEOTRANSFORM
from SiteLayer import SiteLayer, SitePoint
from SSNDataCreator import SSNDataCreator
from Failures import PrerequisiteError, GraphExtractionError, TopologyError

#three sources meeting at (2,2) next to a single stream in column 6
CELLS = {(0,0):2, (1,1):2, (0,2):4, (1,2):4, (0,4):8, (1,3):8, (2,2):4, (3,2):4, (4,2):4,
    (0,6):4, (1,6):4, (2,6):4, (3,6):4, (4,6):4}

def buildContext (geotransform = DEFAULT_GEOTRANSFORM):
    streams = np.zeros((5,7))
    dirs = np.zeros((5,7))
    for cell, code in CELLS.items():
        streams[cell] = 1
        dirs[cell] = code
    context = RunContext(mapUnits = "m")
    context.addMap("streams_r", RasterData(array = streams, geotransform = DEFAULT_GEOTRANSFORM, projection = "", nodata = None))
    context.addMap("dirs", RasterData(array = dirs, geotransform = geotransform, projection = "", nodata = None))
    context.addMap("sites_o", SiteLayer("sites_o", [SitePoint(1, (7.0,-2.5), {"name":"east"}), SitePoint(2, (3.0,-4.0), {"name":"main"})], ["name"]))
    return context

class SSNDataCreatorTests (unittest.TestCase):

    def test_pipeline (self):
        with buildContext() as context:
            creator = SSNDataCreator(context)
            streams = creator.deriveStreams()
            self.assertEqual(len(streams.segments), 5)
            self.assertTrue(creator.checkComplConfluences())

            corrected = creator.correctComplConfluences()
            self.assertEqual(len(corrected.segments), 6)
            self.assertEqual(len(context.getMap("streams_v_o").segments), 5)
            self.assertFalse(creator.checkComplConfluences())
            self.assertAlmostEqual(corrected.totalLength(), streams.totalLength())

            edges = creator.calcEdges()
            self.assertEqual(edges.getNetIDs(), [1, 2])
            self.assertEqual(sorted(s.rid for s in edges.segments.values()), list(range(6)))
            for outlet in edges.getOutletSegments():
                self.assertEqual(outlet.upDist, 0)
            self.assertEqual(edges.segments[1].upDist, 2.5)
            #calcEdges works on a copy
            self.assertIsNone(context.getMap("streams_v").segments[1].rid)

            results = creator.calcSites(locidColumn = "name")
            sites = results["sites"]
            self.assertEqual([site.netID for site in sites.sites], [2, 1])
            self.assertEqual([site.position for site in sites.sites], [(6.5,-2.5), (2.5,-4.0)])
            self.assertEqual(sites.sites[0].upDist, 2.5)

            preds = creator.calcPredictionSites(dist = 1)
            self.assertGreater(len(preds), 0)

            restricted = creator.restrictNetwork(keepNetIDs = [2])
            self.assertEqual(sorted(restricted.segments), [4])
            self.assertEqual(len(context.getMap("edges_o").segments), 6)
            self.assertEqual(creator.getWarnings(), [])
            self.assertEqual(context.listMaps(SiteLayer), ["preds", "preds_o", "sites", "sites_o"])

        self.assertEqual(context.listMaps(), [])

    def test_cleanRemovesNothingWithoutMinLength (self):
        context = buildContext()
        streams = SSNDataCreator(context).deriveStreams(minStreamLength = 0, clean = True)
        self.assertEqual(sorted(streams.segments), [1, 2, 3, 4, 5])

    def test_calcEdgesNeedsCorrection (self):
        creator = SSNDataCreator(buildContext())
        creator.deriveStreams()
        with self.assertRaises(TopologyError):
            creator.calcEdges()

    def test_stagesOutOfOrder (self):
        creator = SSNDataCreator(buildContext())
        with self.assertRaises(PrerequisiteError) as error:
            creator.calcEdges()
        self.assertEqual(error.exception.mapName, "streams_v")
        with self.assertRaises(PrerequisiteError) as error:
            creator.calcSites()
        self.assertEqual(error.exception.mapName, "edges")

    def test_missingRaster (self):
        context = buildContext()
        context.removeMap("dirs")
        with self.assertRaises(PrerequisiteError) as error:
            SSNDataCreator(context).deriveStreams()
        self.assertEqual(error.exception.mapName, "dirs")

    def test_misalignedRasters (self):
        creator = SSNDataCreator(buildContext(geotransform = (0.5, 1.0, 0.0, 0.0, 0.0, -1.0)))
        with self.assertRaises(GraphExtractionError):
            creator.deriveStreams()

    def test_distantSitesWarning (self):
        context = buildContext()
        creator = SSNDataCreator(context)
        creator.deriveStreams()
        creator.correctComplConfluences()
        creator.calcEdges()
        creator.calcSites(maxdist = 0.25)

        self.assertEqual(len(context.getMap("sites")), 0)
        warnings = creator.getWarnings()
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].count, 2)
        self.assertIn("sites", context.warningLog.getFormattedMessage())
        self.assertEqual(context.warningLog.getJSONStruct()["lowPriority"][0]["count"], 2)

    def test_edgeBackupAcrossRestrictions (self):
        context = buildContext()
        creator = SSNDataCreator(context)
        creator.deriveStreams()
        creator.correctComplConfluences()
        creator.calcEdges()
        creator.calcSites()

        creator.restrictNetwork(keepNetIDs = [1, 2])
        creator.restrictNetwork(keepNetIDs = [2])
        self.assertEqual(context.getMap("edges").getNetIDs(), [2])
        self.assertEqual(context.getMap("edges_o").getNetIDs(), [1, 2])

        #new edges make the backup stale
        creator.calcEdges()
        self.assertFalse(context.hasMap("edges_o"))
        creator.restrictNetwork(keepNetIDs = [1])
        self.assertEqual(len(context.getMap("edges_o").segments), 6)
