def assign(rooms_client, headers, student_id: int, room_id: int, bed_number: int) -> None:
    response = rooms_client.post(
        "/api/warden/assign-room",
        json={"student_id": student_id, "room_id": room_id, "bed_number": bed_number},
        headers=headers,
    )
    assert response.status_code == 200, response.text


def bed(rooms_client, headers, room_id: int, bed_number: int) -> dict:
    detail = rooms_client.get(f"/api/rooms/{room_id}", headers=headers).json()
    return next(item for item in detail["beds"] if item["bed_number"] == bed_number)


def test_room_change_approval_moves_student(rooms_client, approvals_client, warden_headers, create_student):
    student = create_student("RC1", full_name="Mover")
    assign(rooms_client, warden_headers, student["id"], 1, 1)

    submitted = approvals_client.post(
        "/api/student/room-change-request",
        json={"requested_room_id": 2, "requested_bed_number": 1, "reason": "Closer to the library"},
        headers=student["headers"],
    )
    assert submitted.status_code == 201
    request_id = submitted.json()["request_id"]

    listing = approvals_client.get("/api/warden/room-change-requests", headers=warden_headers).json()
    assert listing[0]["student_name"] == "Mover"
    assert listing[0]["current_room"] == "R001"
    assert listing[0]["current_bed_number"] == 1
    assert listing[0]["requested_room"] == "R002"
    assert listing[0]["status"] == "pending"

    approved = approvals_client.put(
        f"/api/warden/room-change-requests/{request_id}/approve",
        json={"comments": "ok"},
        headers=warden_headers,
    )
    assert approved.status_code == 200

    assert bed(rooms_client, warden_headers, 1, 1) == {
        "id": 1,
        "room_id": 1,
        "bed_number": 1,
        "status": "available",
        "student_id": None,
        "student_name": None,
    }
    target = bed(rooms_client, warden_headers, 2, 1)
    assert target["status"] == "occupied"
    assert target["student_id"] == student["id"]

    processed = approvals_client.get("/api/warden/room-change-requests", headers=warden_headers).json()[0]
    assert processed["status"] == "approved"
    assert processed["comments"] == "ok"
    assert processed["processed_at"] is not None


def test_approval_fails_when_target_taken_meanwhile(rooms_client, approvals_client, warden_headers, create_student):
    mover = create_student("RC2")
    other = create_student("RC3")
    assign(rooms_client, warden_headers, mover["id"], 1, 1)

    request_id = approvals_client.post(
        "/api/student/room-change-request",
        json={"requested_room_id": 3, "requested_bed_number": 2},
        headers=mover["headers"],
    ).json()["request_id"]
    assign(rooms_client, warden_headers, other["id"], 3, 2)

    response = approvals_client.put(f"/api/warden/room-change-requests/{request_id}/approve", headers=warden_headers)
    assert response.status_code == 409
    assert response.json()["kind"] == "bed_occupied"

    request = approvals_client.get("/api/warden/room-change-requests", headers=warden_headers).json()[0]
    assert request["status"] == "pending"
    assert bed(rooms_client, warden_headers, 1, 1)["student_id"] == mover["id"]
    assert bed(rooms_client, warden_headers, 3, 2)["student_id"] == other["id"]


def test_rejection_leaves_beds_alone(rooms_client, approvals_client, warden_headers, create_student):
    student = create_student("RC4")
    assign(rooms_client, warden_headers, student["id"], 1, 1)
    request_id = approvals_client.post(
        "/api/student/room-change-request",
        json={"requested_room_id": 2, "requested_bed_number": 3},
        headers=student["headers"],
    ).json()["request_id"]

    rejected = approvals_client.put(f"/api/warden/room-change-requests/{request_id}/reject", headers=warden_headers)
    assert rejected.status_code == 200
    assert rejected.json()["message"] == "Room change request rejected successfully"

    assert bed(rooms_client, warden_headers, 1, 1)["student_id"] == student["id"]
    assert bed(rooms_client, warden_headers, 2, 3)["status"] == "available"

    again = approvals_client.put(f"/api/warden/room-change-requests/{request_id}/approve", headers=warden_headers)
    assert again.status_code == 409
    assert again.json()["kind"] == "already_processed"


def test_room_change_request_validation(approvals_client, warden_headers, create_student):
    student = create_student("RC5")

    missing = approvals_client.post(
        "/api/student/room-change-request", json={"reason": "no target"}, headers=student["headers"]
    )
    assert missing.status_code == 422
    assert missing.json()["kind"] == "validation"

    no_room = approvals_client.post(
        "/api/student/room-change-request",
        json={"requested_room_id": 999, "requested_bed_number": 1},
        headers=student["headers"],
    )
    assert no_room.status_code == 404

    from_warden = approvals_client.post(
        "/api/student/room-change-request",
        json={"requested_room_id": 1, "requested_bed_number": 1},
        headers=warden_headers,
    )
    assert from_warden.status_code == 403


def test_unknown_action_and_missing_request(approvals_client, warden_headers):
    bogus = approvals_client.put("/api/warden/room-change-requests/1/maybe", headers=warden_headers)
    assert bogus.status_code == 400
    assert bogus.json()["kind"] == "validation"

    missing = approvals_client.put("/api/warden/room-change-requests/77/approve", headers=warden_headers)
    assert missing.status_code == 404
    assert missing.json()["kind"] == "request_not_found"


def test_personal_details_sparse_patch(users_client, approvals_client, warden_headers, create_student):
    student = create_student("PD1", phone="9000000011", city="Pune", guardian_name="Original Guardian")

    submitted = approvals_client.post(
        "/api/student/personal-details-update-request",
        json={"phone": "9000000022"},
        headers=student["headers"],
    )
    assert submitted.status_code == 201
    request_id = submitted.json()["request_id"]

    duplicate = approvals_client.post(
        "/api/student/personal-details-update-request",
        json={"city": "Mumbai"},
        headers=student["headers"],
    )
    assert duplicate.status_code == 409

    listing = approvals_client.get("/api/warden/personal-details-update-requests", headers=warden_headers).json()
    assert listing[0]["roll_no"] == "PD1"
    assert listing[0]["phone"] == "9000000022"
    assert listing[0]["city"] is None

    approved = approvals_client.put(
        f"/api/warden/personal-details-update-requests/{request_id}/approve", headers=warden_headers
    )
    assert approved.status_code == 200

    profile = users_client.get("/api/profile", headers=student["headers"]).json()
    assert profile["phone"] == "9000000022"
    assert profile["city"] == "Pune"
    assert profile["guardian_name"] == "Original Guardian"


def test_personal_details_rejection(users_client, approvals_client, warden_headers, create_student):
    student = create_student("PD2", city="Delhi")
    request_id = approvals_client.post(
        "/api/student/personal-details-update-request",
        json={"city": "Chennai", "state": "Tamil Nadu"},
        headers=student["headers"],
    ).json()["request_id"]

    rejected = approvals_client.put(
        f"/api/warden/personal-details-update-requests/{request_id}/reject",
        json={"comments": "Please attach proof"},
        headers=warden_headers,
    )
    assert rejected.status_code == 200

    profile = users_client.get("/api/profile", headers=student["headers"]).json()
    assert profile["city"] == "Delhi"
    assert profile["state"] is None

    mine = approvals_client.get("/api/student/my-requests", headers=student["headers"]).json()
    assert mine["room_change_requests"] == []
    assert mine["personal_details_requests"][0]["status"] == "rejected"
    assert mine["personal_details_requests"][0]["comments"] == "Please attach proof"


def test_personal_details_phone_must_be_valid(approvals_client, create_student):
    student = create_student("PD3")

    response = approvals_client.post(
        "/api/student/personal-details-update-request",
        json={"guardian_phone": "0123"},
        headers=student["headers"],
    )
    assert response.status_code == 422
    assert response.json()["kind"] == "validation"


def test_personal_details_duplicate_phone_keeps_request_pending(approvals_client, warden_headers, create_student):
    create_student("PD4", phone="9000000501")
    student = create_student("PD5")
    request_id = approvals_client.post(
        "/api/student/personal-details-update-request",
        json={"phone": "9000000501"},
        headers=student["headers"],
    ).json()["request_id"]

    response = approvals_client.put(
        f"/api/warden/personal-details-update-requests/{request_id}/approve", headers=warden_headers
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Phone number already exists", "kind": "duplicate_user"}

    listing = approvals_client.get("/api/warden/personal-details-update-requests", headers=warden_headers).json()
    assert listing[0]["status"] == "pending"
