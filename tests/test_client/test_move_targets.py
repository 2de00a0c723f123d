"""Tests for move destination resolution."""

from resource_tree.logic.move_targets import (
    ROOT_TARGET_NAME,
    enabled_targets,
    find_target,
    is_valid_target,
    iter_targets,
    resolve_move_targets,
)
from resource_tree.models import FolderNode


def _ids(root):
    return {target.id for target in iter_targets(root)}


class TestExampleScenario:
    """Moving the Docs folder out of the root."""

    def test_moving_folder_and_its_contents_are_excluded(self, scenario_tree):
        """Test Docs and everything below it never appear."""
        docs = scenario_tree.get('docs')

        root = resolve_move_targets(scenario_tree, [docs], origin_id='')

        assert 'docs' not in _ids(root)
        assert 'drafts-old' not in _ids(root)
        assert 'draft' not in _ids(root)

    def test_root_disabled_when_move_starts_at_root(self, scenario_tree):
        """Test the synthetic root is disabled for a move from the root."""
        root = resolve_move_targets(
            scenario_tree,
            [scenario_tree.get('docs')],
            origin_id='',
        )

        assert root.id == ''
        assert root.name == ROOT_TARGET_NAME
        assert root.disabled
        assert not is_valid_target(root, '')

    def test_sibling_folders_enabled(self, scenario_tree):
        """Test sibling folders and their subfolders are legal targets."""
        root = resolve_move_targets(
            scenario_tree,
            [scenario_tree.get('docs')],
            origin_id='',
        )

        enabled = [target.id for target in enabled_targets(root)]
        assert enabled == ['images', 'archive']


class TestRedundantMove:
    """Tests for the folder a move starts from."""

    def test_origin_present_but_disabled(self, scenario_tree):
        """Test moving out of Docs keeps Docs visible but disabled."""
        draft = scenario_tree.get('draft')

        root = resolve_move_targets(scenario_tree, [draft], origin_id='docs')

        docs = find_target(root, 'docs')
        assert docs is not None
        assert docs.disabled
        assert not root.disabled
        assert is_valid_target(root, '')
        assert is_valid_target(root, 'drafts-old')


class TestAcyclicity:
    """Tests that no node can be moved into itself or below itself."""

    def test_no_enabled_target_inside_any_moving_node(self, scenario_tree):
        """Test every node against every folder of the hierarchy."""
        folders = [
            node for node in scenario_tree if isinstance(node, FolderNode)
        ]
        for moving in scenario_tree:
            root = resolve_move_targets(
                scenario_tree,
                [moving],
                origin_id=moving.parent_id,
            )
            for folder in folders:
                inside = folder.id == moving.id or scenario_tree.is_descendant(
                    folder.id,
                    moving.id,
                )
                if inside:
                    assert not is_valid_target(root, folder.id), (
                        moving.id,
                        folder.id,
                    )

    def test_multiple_moving_nodes(self, scenario_tree):
        """Test every moving folder prunes its own subtree."""
        root = resolve_move_targets(
            scenario_tree,
            [scenario_tree.get('drafts-old'), scenario_tree.get('images')],
            origin_id='',
        )

        assert _ids(root) == {'', 'docs'}


def test_files_are_never_targets(scenario_tree):
    """Test the candidate tree only holds folders."""
    root = resolve_move_targets(scenario_tree, [], origin_id='images')

    assert 'readme' not in _ids(root)
    assert 'draft' not in _ids(root)
    assert _ids(root) == {'', 'docs', 'drafts-old', 'images', 'archive'}
