from StreamGraph import PERSISTED_DIGITS

#a point of an observation or prediction site map
class SitePoint (object):
    def __init__(self, cat, position, attributes = None):
        #unique feature id of the imported point
        self.cat = cat
        self.position = position
        self.originalPosition = position
        self.attributes = dict(attributes) if attributes is not None else {}
        #set while snapping, see SnapSites.prepareSites
        self.pid = None
        self.locID = None
        self.netID = None
        self.rid = None
        self.strEdge = None
        self.catEdge = None
        self.dist = None
        self.distalong = None
        self.upDist = None
        self.ratio = None

    def copy (self):
        newSite = SitePoint(self.cat, self.position, self.attributes)
        newSite.__dict__.update(self.__dict__)
        newSite.attributes = dict(self.attributes)
        return newSite

    def getRecord (self):
        """ The attribute table row of this site. """
        record = {"cat":self.cat}
        record.update(self.attributes)
        if self.catEdge is not None:
            record["cat_edge"] = self.catEdge
        if self.dist is not None:
            record["dist"] = self.dist
            record["NEAR_X"] = self.position[0]
            record["NEAR_Y"] = self.position[1]
        record["pid"] = self.pid
        record["locID"] = self.locID
        record["netID"] = self.netID
        record["rid"] = self.rid
        record["str_edge"] = self.strEdge
        record["distalong"] = None if self.distalong is None else round(self.distalong, PERSISTED_DIGITS)
        record["upDist"] = self.upDist
        record["ratio"] = self.ratio
        return record

class SiteLayer (object):
    """ A named point set with an attribute table. """
    def __init__(self, name, sites = None, columns = None):
        self.name = name
        self.sites = sites if sites is not None else []
        #user columns, in import order
        self.columns = list(columns) if columns is not None else []

    def __len__ (self):
        return len(self.sites)

    def copy (self, name):
        return SiteLayer(name, [site.copy() for site in self.sites], self.columns)

    def hasColumn (self, column):
        return column in self.columns

    def getColumnValues (self, column):
        return [site.attributes.get(column) for site in self.sites]

    def getNetIDs (self):
        return sorted(set(site.netID for site in self.sites if site.netID is not None))

    def getAttributeTable (self):
        return [site.getRecord() for site in self.sites]

    def getGeoJSON (self):
        """ Get a GeoJson representation of the sites. """
        geojson = {
            "type": "FeatureCollection",
            "features":[]
        }
        for site in self.sites:
            feature = {
                "type":"Feature",
                "geometry":{
                    "type": "Point",
                    "coordinates": [site.position[0], site.position[1]]
                },
                "properties": site.getRecord()
            }
            geojson["features"].append(feature)
        return geojson
