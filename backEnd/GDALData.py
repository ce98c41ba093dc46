#reads the rasters and point sets the GIS engine leaves on disk
from osgeo import gdal, ogr, osr
import numpy as np
from Failures import GraphExtractionError, PrerequisiteError
from RunContext import RasterData, STREAMS_RASTER, DIRECTIONS_RASTER, SITES, ORIGINAL_SUFFIX
from SiteLayer import SiteLayer, SitePoint

def readRaster (path):
    """ Read the first band of a raster. Nodata cells become NaN.

    :return: A RasterData instance. """
    try:
        dataset = gdal.Open(str(path), gdal.GA_ReadOnly)
    except RuntimeError as e:
        raise GraphExtractionError("cannot open raster " + str(path) + ": " + str(e))
    if dataset is None:
        raise GraphExtractionError("cannot open raster " + str(path))

    band = dataset.GetRasterBand(1)
    array = band.ReadAsArray().astype(np.float64)
    nodata = band.GetNoDataValue()
    if nodata is not None:
        array[array == nodata] = np.nan

    return RasterData(array = array, geotransform = dataset.GetGeoTransform(), projection = dataset.GetProjection(), nodata = nodata)

def getMapUnits (projection):
    """ Name of the linear unit of a WKT projection, None if it can't be told. """
    if not projection:
        return None
    srs = osr.SpatialReference()
    srs.ImportFromWkt(projection)
    if srs.IsProjected():
        return srs.GetLinearUnitsName()
    if srs.IsGeographic():
        return srs.GetAngularUnitsName()
    return None

def loadSites (path, name = SITES, layerName = None):
    """ Load a point layer with all its attribute fields.

    Features get sequential cats from 1 in reading order. Features without geometry are skipped.

    :return: A SiteLayer named '<name>_o'. """
    try:
        dataSource = ogr.Open(str(path))
    except RuntimeError as e:
        raise PrerequisiteError(str(path), "Cannot open vector data: " + str(e))
    if dataSource is None:
        raise PrerequisiteError(str(path), "Cannot open vector data.")

    if layerName is not None:
        layer = dataSource.GetLayerByName(layerName)
    else:
        layer = dataSource.GetLayer()
    if layer is None:
        raise PrerequisiteError(str(layerName), "Layer not found in " + str(path) + ".")

    definition = layer.GetLayerDefn()
    columns = [definition.GetFieldDefn(i).GetName() for i in range(definition.GetFieldCount())]

    sites = []
    layer.ResetReading()
    for feature in layer:
        geom = feature.GetGeometryRef()
        if geom is None:
            continue
        point = geom.GetPoint(0)
        attributes = dict((column, feature.GetField(column)) for column in columns)
        sites.append(SitePoint(len(sites) + 1, (point[0], point[1]), attributes))

    return SiteLayer(name + ORIGINAL_SUFFIX, sites, columns)

def importData (context, streams, dirs, sites = None, predictions = None):
    """ Load the input data into a run context.

    :param streams: Path of the stream raster.
    :param dirs: Path of the D8 flow direction raster.
    :param sites: Path of the observation sites.
    :param predictions: dict of map name -> path of prediction sites. """
    streamsRaster = context.addMap(STREAMS_RASTER, readRaster(streams))
    context.addMap(DIRECTIONS_RASTER, readRaster(dirs))
    if context.mapUnits is None:
        context.mapUnits = getMapUnits(streamsRaster.projection)

    if sites is not None:
        context.addMap(SITES + ORIGINAL_SUFFIX, loadSites(sites, SITES))
    if predictions is not None:
        for name, path in predictions.items():
            context.addMap(name + ORIGINAL_SUFFIX, loadSites(path, name))

    if __debug__:
        print("Imported " + ", ".join(context.listMaps()))
