from AutoPark.api.DataAccess.AccessVehicles import AccessVehicles, normalize_licenseplate


def test_licenseplate_is_normalised(conn, make_user, make_vehicle):
    vehicle = make_vehicle(make_user())
    access = AccessVehicles(conn=conn)

    assert vehicle.licenseplate == "AB-001-CD"
    assert access.get_vehicle_bylicenseplate(" ab-001-cd ").id == vehicle.id
    assert normalize_licenseplate("xx 12 yy") == "XX12YY"


def test_vehicles_by_user(conn, make_user, make_vehicle):
    owner, other = make_user(), make_user()
    first, second = make_vehicle(owner), make_vehicle(owner)
    make_vehicle(other)

    vehicles = AccessVehicles(conn=conn).get_vehicles_byuser(owner)
    assert [v.id for v in vehicles] == [first.id, second.id]
    assert all(v.user.id == owner.id for v in vehicles)


def test_duplicate_plate_is_refused(conn, make_user, make_vehicle):
    user = make_user()
    vehicle = make_vehicle(user)
    access = AccessVehicles(conn=conn)

    vehicle.id = None
    assert access.add_vehicle(vehicle) is False


def test_update_rate_type_and_delete(conn, make_user, make_vehicle):
    vehicle = make_vehicle(make_user())
    access = AccessVehicles(conn=conn)

    vehicle.rate_type = "HOURLY"
    vehicle.color = "red"
    assert access.update_vehicle(vehicle) is True
    fetched = access.get_vehicle(vehicle.id)
    assert fetched.rate_type == "HOURLY"
    assert fetched.color == "red"

    assert access.delete_vehicle(vehicle) is True
    assert access.get_vehicle(vehicle.id) is None
