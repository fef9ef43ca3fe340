from midicontrol.storage import (
    InputMapping,
    MappingType,
    MidiControl,
    ProfileManager,
    SettingsStore,
)


def test_settings_store_round_trip():
    store = SettingsStore()
    binding = MidiControl(channel=3, control=74, is_relative=True)
    store.save_mapping(5, binding)
    assert store.load_mapping(5) == binding


def test_settings_store_missing_is_none():
    assert SettingsStore().load_mapping(42) is None


def test_settings_store_overwrites():
    store = SettingsStore()
    store.save_mapping(1, MidiControl(0, 7))
    store.save_mapping(1, MidiControl(2, 10))
    assert store.load_mapping(1) == MidiControl(2, 10)


def test_profile_get_and_set():
    profile = ProfileManager()
    assert profile.get_binding(9) is None
    profile.set_binding(9, MidiControl(1, 11))
    assert profile.get_binding(9) == MidiControl(1, 11)


def test_profile_remove_binding():
    profile = ProfileManager()
    profile.set_binding(9, MidiControl(1, 11))
    assert profile.remove_binding(9) is True
    assert profile.get_binding(9) is None
    assert profile.remove_binding(9) is False


def test_profile_all_mappings():
    profile = ProfileManager()
    profile.set_binding(1, MidiControl(0, 7))
    profile.set_binding(2, MidiControl(0, 10))
    mappings = profile.all_mappings()
    assert {m.control_id: m.midi_mapping for m in mappings} == {
        1: MidiControl(0, 7),
        2: MidiControl(0, 10),
    }
    assert all(m.mapping_type is MappingType.ENCODER for m in mappings)


def test_profile_reset_to_defaults():
    profile = ProfileManager()
    profile.set_binding(3, MidiControl(5, 5))
    profile.reset_to_defaults()
    assert profile.get_binding(3) is None
    assert profile.get_binding(71) == MidiControl(channel=0, control=1, is_relative=False)
    assert profile.get_binding(72) == MidiControl(channel=0, control=2, is_relative=False)
    assert len(profile.all_mappings()) == 2


def test_profile_save_and_load_succeed():
    profile = ProfileManager()
    assert profile.save_profile() is True
    assert profile.load_profile() is True


def test_input_mapping_defaults_to_encoder():
    mapping = InputMapping(control_id=4, midi_mapping=MidiControl())
    assert mapping.mapping_type is MappingType.ENCODER
    assert mapping.midi_mapping == MidiControl(0, 0, False)