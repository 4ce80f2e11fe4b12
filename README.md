# arkitect

arkitect checks that the files of a project follow rules written down in a
YAML file. A rule picks a set of files, narrows it down, and then states what
those files must, should or could look like. Every failed expectation is
reported as a violation with a severity:

- `musts` produce `ERROR` violations,
- `shoulds` produce `WARNING` violations,
- `coulds` produce `INFO` violations.

`arkitect verify` fails only when there are `ERROR` violations.

## Installation

```
pip install arkitect
```

## Configuration

Without arguments the commands read `.arkitect.yaml` in the current
directory. You can pass one or more files or directories instead; every file
with a `.yaml` extension found in a directory, searched recursively, is used.
A path that does not exist is an error.

```yaml
rules:
  - name: dockerfiles live in the service folders
    kind: file
    matcher:
      kind: all
    thats:
      - kind: are_in_folder
        folder: ./services
        recursive: true
      - kind: end_with
        suffix: Dockerfile
    excepts:
      - kind: this
        filePath: ./services/legacy/Dockerfile
    musts:
      - kind: exist
      - kind: have_permissions
        permissions: "-rw-r--r--"
    shoulds:
      - kind: have_content_matching_regex
        regex: "^FROM .+"
        options:
          - kind: ignore_new_lines_at_the_end_of_file
    because: all services are built the same way
```

The only rule `kind` is `file`; any other kind is reported as an error for
that rule.

### Matchers

| kind  | fields      | selects                                   |
|-------|-------------|-------------------------------------------|
| `one` | `filePath`  | a single file                             |
| `set` | `filePaths` | a list of files                           |
| `all` | none        | nothing until a `that` fills the set      |

### Thats

- `are_in_folder` (`folder`, `recursive`): the files in a folder, or in the
  folder and all its subfolders.
- `end_with` (`suffix`): keep the paths that end with the suffix.
- `contain_value` (`value`): keep the paths whose text contains the value.

### Excepts

- `this` (`filePath`): drop one file from the set. An absolute path is
  compared with each file's absolute path; a relative one is matched as a
  path suffix.

### Expectations

- `be_gitencrypted`: the file is encrypted by git-crypt (runs
  `git crypt status`).
- `be_gitignored`: the file is ignored by git (runs `git check-ignore`).
- `contain_value` (`value`): the content contains the value.
- `end_with` (`suffix`): the file name ends with the suffix.
- `exist`: the file exists. It takes no options.
- `have_content_matching` (`value`): the content equals the value.
- `have_content_matching_regex` (`regex`): the content matches the regex.
- `have_permissions` (`permissions`): the mode string, e.g. `-rw-r--r--`.
- `match_glob` (`glob`, `basePath`): the absolute path matches the glob
  joined to `basePath`; `*` and `?` do not cross path separators.
- `match_regex` (`regex`): the file name matches the regex.
- `start_with` (`prefix`): the file name starts with the prefix.

Each expectation accepts `options`:

- `negated`: turn the expectation around.
- `ignore_case`: compare content case-insensitively.
- `ignore_new_lines_at_the_end_of_file`: drop trailing newlines before
  comparing.
- `match_single_lines` (`separator`, default newline): check each line on
  its own.

## Usage

Check the configuration files against the JSON schema at
`api/config_schema.json` in the current directory:

```
arkitect validate
arkitect validate path/to/rules.yaml
```

Run the rules against the project:

```
arkitect verify
arkitect verify path/to/rules/
```

Show version information:

```
arkitect version
```

All commands take `--output=text` (the default) or `--output=json`, before or
after the command name. The default can also be set with the `OUTPUT`
environment variable. A failing command reports the error on standard error
and exits with status 1.

## Using it from Python

Rules can be built in code:

```python
from arkitect.file_rule import all_files
from arkitect.file_that import AreInFolder
from arkitect.file_except import This
from arkitect.file_expect import Exist, StartWith

violations, errors = (
    all_files()
    .that(AreInFolder("./services", False))
    .except_(This("./services/README.md"))
    .must(Exist())
    .should(StartWith("Docker"))
    .because("services are containerised")
)

for violation in violations:
    print(violation)  # e.g. "[WARNING] file's name 'x' does not start with 'Docker'"
```

Content and permission checks (`ContainValue`, `HaveContentMatching`,
`HaveContentMatchingRegex`, `HavePermissions`) live in `arkitect.file_content`.
A builder can be evaluated once; reusing it records a `RuleBuilderLockedError`.

A configuration loaded from YAML runs with `arkitect.config.execute` after
`arkitect.config.Root.from_dict`; each `RuleExecutionResult` carries the rule
name, its violations and its errors.

## What it does not do

- No JSON schema is shipped: `arkitect validate` needs
  `api/config_schema.json` in the directory it is run from.
- `arkitect version` reports `unknown` for the version, commit and build time;
  only the Python version and platform are filled in.