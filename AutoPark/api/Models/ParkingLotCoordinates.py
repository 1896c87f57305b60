class ParkingLotCoordinates:

    def __init__(self,
                 lat: float,
                 lng: float,
                 id: int = None):

        self.id = id
        self.lat = lat
        self.lng = lng


    def __repr__(self):
        return f"({self.lat}, {self.lng})"
