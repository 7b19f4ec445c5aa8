"""
Tests for the warden models
"""
from datetime import timedelta

import pytest

from warden.models import (
    BackupCode,
    Channel,
    DeviceSession,
    MethodKind,
    MethodState,
    ModelValidationError,
    RiskLevel,
    SessionStatus,
    TotpCredential,
    TwoFactorAccountState,
    VerificationSession,
)

from fakes import START


def test_account_state_defaults():
    """
    A new account has every channel disabled and no default method
    """
    state = TwoFactorAccountState(user_id="user-1")
    assert state.enabled is False
    assert state.default_method == MethodKind.NONE
    assert set(state.methods) == set(Channel)
    assert state.enabled_channels == []
    state.validate()


def test_account_state_round_trip():
    """
    as_dict/from_dict keep channel keys, method flags and timestamps
    """
    state = TwoFactorAccountState(user_id="user-1", enabled=True, default_method=MethodKind.SMS)
    state.methods[Channel.SMS] = MethodState(enabled=True, enabled_at=START)

    data = state.as_dict(convert_datetime_to_iso_string=True)
    assert data['default_method'] == 'SMS'
    assert data['methods']['SMS'] == {'enabled': True, 'enabled_at': START.isoformat()}

    loaded = TwoFactorAccountState.from_dict(data)
    assert loaded.default_method is MethodKind.SMS
    assert loaded.methods[Channel.SMS] == MethodState(enabled=True, enabled_at=START)
    assert loaded.methods[Channel.EMAIL].enabled is False
    assert loaded.entity_id == state.entity_id


def test_account_state_enabled_must_match_methods():
    state = TwoFactorAccountState(user_id="user-1", enabled=True)
    with pytest.raises(ModelValidationError):
        state.validate()


def test_account_state_default_must_be_enabled():
    state = TwoFactorAccountState(user_id="user-1", default_method=MethodKind.EMAIL)
    with pytest.raises(ModelValidationError) as ex:
        state.validate()
    assert "EMAIL" in str(ex.value)


def test_prepare_for_save_bumps_version():
    state = TwoFactorAccountState(user_id="user-1")
    version = state.version
    state.prepare_for_save(changed_by_id="admin")
    assert state.previous_version == version
    assert state.version != version
    assert state.changed_by_id == "admin"


def test_sensitive_fields_are_masked_in_repr():
    """
    Secrets and codes never appear in repr output
    """
    credential = TotpCredential(user_id="user-1", secret="JBSWY3DPEHPK3PXP")
    code = BackupCode(user_id="user-1", code="12345678")
    assert "JBSWY3DPEHPK3PXP" not in repr(credential)
    assert "12345678" not in repr(code)
    assert "user-1" in repr(credential)


def test_totp_credential_flags():
    credential = TotpCredential(user_id="user-1", pending_secret="ABC")
    assert credential.has_pending_secret
    assert not credential.is_enrolled


def test_backup_code_must_be_digits():
    with pytest.raises(ModelValidationError):
        BackupCode(user_id="user-1", code="12ab").validate()


def test_verification_session_round_trip_hides_code():
    session = VerificationSession(
        session_id="s1", user_id="user-1", channel=Channel.WHATSAPP, target_identity="+15551234567",
        code="987650", issued_at=START, expires_at=START + timedelta(minutes=5),
        resend_eligible_at=START + timedelta(seconds=60),
    )
    assert "987650" not in repr(session)
    loaded = VerificationSession.from_dict(session.as_dict())
    assert loaded == session
    assert loaded.seconds_until_resend(START + timedelta(seconds=59.5)) == 1
    assert loaded.seconds_until_expiry(START) == 300


@pytest.mark.parametrize("score, level", [
    (0, RiskLevel.LOW), (33, RiskLevel.LOW), (34, RiskLevel.MEDIUM),
    (66, RiskLevel.MEDIUM), (67, RiskLevel.HIGH), (100, RiskLevel.HIGH),
])
def test_device_session_risk_level(score, level):
    assert DeviceSession(risk_score=score).risk_level() is level


def test_device_session_risk_score_bounds():
    with pytest.raises(ModelValidationError):
        DeviceSession(risk_score=101).validate()
    with pytest.raises(ModelValidationError):
        DeviceSession(risk_flags={'teleported': True}).validate()


def test_device_session_status():
    """
    Presence follows last_seen_at; expiry means offline and revocation wins
    """
    session = DeviceSession(last_seen_at=START, expires_at=START + timedelta(days=1))
    assert session.status_at(START + timedelta(minutes=5)) is SessionStatus.ONLINE
    assert session.status_at(START + timedelta(minutes=6)) is SessionStatus.IDLE
    assert session.status_at(START + timedelta(minutes=31)) is SessionStatus.OFFLINE
    assert session.status_at(START + timedelta(days=1)) is SessionStatus.OFFLINE
    session.revoked = True
    assert session.status_at(START) is SessionStatus.REVOKED


def test_as_dict_can_export_properties():
    credential = TotpCredential(user_id="user-1", secret="JBSWY3DPEHPK3PXP")
    data = credential.as_dict(export_properties=True)
    assert data['is_enrolled'] is True
    assert data['has_pending_secret'] is False
    assert 'is_enrolled' not in credential.as_dict()
