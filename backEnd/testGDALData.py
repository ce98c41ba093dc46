import json
import os
import tempfile
import unittest
import numpy as np
from RunContext import RunContext
from Failures import GraphExtractionError, PrerequisiteError

try:
    from osgeo import gdal, osr
    import GDALData
    HAVE_GDAL = True
except ImportError:
    HAVE_GDAL = False

GEOTRANSFORM = (500000.0, 10.0, 0.0, 5000050.0, 0.0, -10.0)

def writeRaster (path, array, nodata = None):
    driver = gdal.GetDriverByName("GTiff")
    dataset = driver.Create(path, array.shape[1], array.shape[0], 1, gdal.GDT_Float32)
    dataset.SetGeoTransform(GEOTRANSFORM)
    srs = osr.SpatialReference()
    srs.ImportFromEPSG(32633)
    dataset.SetProjection(srs.ExportToWkt())
    band = dataset.GetRasterBand(1)
    if nodata is not None:
        band.SetNoDataValue(nodata)
    band.WriteArray(array)
    band.FlushCache()
    dataset = None

def writePoints (path, points):
    features = []
    for x, y, name, value in points:
        features.append({"type":"Feature", "geometry":{"type":"Point", "coordinates":[x, y]}, "properties":{"name":name, "value":value}})
    with open(path, "w") as f:
        json.dump({"type":"FeatureCollection", "features":features}, f)

@unittest.skipUnless(HAVE_GDAL, "GDAL is not installed")
class GDALDataTests (unittest.TestCase):

    def setUp (self):
        self.directory = tempfile.TemporaryDirectory()
        self.streamsPath = os.path.join(self.directory.name, "streams.tif")
        self.dirsPath = os.path.join(self.directory.name, "dirs.tif")
        self.sitesPath = os.path.join(self.directory.name, "sites.geojson")

        streams = np.full((5,3), -9999.0)
        streams[:,1] = 1
        dirs = np.zeros((5,3))
        dirs[:,1] = 4
        writeRaster(self.streamsPath, streams, nodata = -9999)
        writeRaster(self.dirsPath, dirs)
        writePoints(self.sitesPath, [(500016.0, 5000025.0, "upper", 3), (500014.0, 5000005.0, "lower", 7)])

    def tearDown (self):
        self.directory.cleanup()

    def test_readRaster (self):
        raster = GDALData.readRaster(self.streamsPath)
        self.assertEqual(raster.array.shape, (5,3))
        self.assertTrue(np.isnan(raster.array[0,0]))
        self.assertEqual(raster.array[0,1], 1)
        self.assertEqual(tuple(raster.geotransform), GEOTRANSFORM)
        self.assertEqual(raster.nodata, -9999)

    def test_readMissingRaster (self):
        with self.assertRaises(GraphExtractionError):
            GDALData.readRaster(os.path.join(self.directory.name, "missing.tif"))

    def test_mapUnits (self):
        raster = GDALData.readRaster(self.streamsPath)
        self.assertEqual(GDALData.getMapUnits(raster.projection), "metre")
        self.assertIsNone(GDALData.getMapUnits(""))

    def test_loadSites (self):
        sites = GDALData.loadSites(self.sitesPath)
        self.assertEqual(sites.name, "sites_o")
        self.assertEqual(sites.columns, ["name", "value"])
        self.assertEqual([site.cat for site in sites.sites], [1, 2])
        self.assertEqual(sites.sites[1].attributes["name"], "lower")
        self.assertEqual(sites.sites[0].position, (500016.0, 5000025.0))

    def test_loadMissingSites (self):
        with self.assertRaises(PrerequisiteError):
            GDALData.loadSites(os.path.join(self.directory.name, "missing.geojson"))

    def test_importData (self):
        context = RunContext()
        GDALData.importData(context, self.streamsPath, self.dirsPath, sites = self.sitesPath, predictions = {"preds":self.sitesPath})
        self.assertEqual(context.listMaps(), ["dirs", "preds_o", "sites_o", "streams_r"])
        self.assertEqual(context.getMapUnits(), "metre")
