"""Jenkins pipeline and job config rendering.

The generated job is a plain Pipeline job whose script is fixed in shape: it
declares the build parameters and hands them to a shared library step that
does the real work.
"""

from __future__ import annotations

BUILD_PARAMETERS: tuple[tuple[str, str, bool], ...] = (
    ("REPO_OWNER", "Repository owner", True),
    ("REPO_NAME", "Repository name", True),
    ("BRANCH_NAME", "Branch name", True),
    ("COMMIT_SHA", "Commit SHA", True),
    ("COMMIT_MESSAGE", "Commit message", True),
    ("JENKINSFILE", "Jenkinsfile content", False),
)

IDENTITY_MARKER_PREFIX = "github-jenkins-bridge:"


def escape_xml(text: str) -> str:
    """Escape text for an XML element body.

    `&` must be replaced first so the entities produced for `<` and `>` are
    not escaped a second time.
    """

    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _groovy_literal(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def identity_marker(owner: str, repo: str, branch: str) -> str:
    """Marker stored in the job description to record which push target owns it."""

    return f"{IDENTITY_MARKER_PREFIX}{owner}/{repo}@{branch}"


def render_pipeline_script(owner: str, repo: str, branch: str, entry_point: str) -> str:
    """Render the declarative pipeline for one repository branch."""

    return f"""
pipeline {{
  agent any

  parameters {{
    string(name: 'REPO_OWNER', defaultValue: {_groovy_literal(owner)})
    string(name: 'REPO_NAME', defaultValue: {_groovy_literal(repo)})
    string(name: 'BRANCH_NAME', defaultValue: {_groovy_literal(branch)})
    string(name: 'COMMIT_SHA', defaultValue: '')
    string(name: 'COMMIT_MESSAGE', defaultValue: '')
  }}

  stages {{
    stage('Process') {{
      steps {{
        {entry_point}(
          repoOwner: params.REPO_OWNER,
          repoName: params.REPO_NAME,
          branch: params.BRANCH_NAME,
          commitSha: params.COMMIT_SHA
        )
      }}
    }}
  }}
}}
"""


def _parameter_definitions() -> str:
    blocks = []
    for name, description, trim in BUILD_PARAMETERS:
        blocks.append(
            "        <hudson.model.StringParameterDefinition>\n"
            f"          <name>{name}</name>\n"
            f"          <description>{description}</description>\n"
            "          <defaultValue></defaultValue>\n"
            f"          <trim>{'true' if trim else 'false'}</trim>\n"
            "        </hudson.model.StringParameterDefinition>"
        )
    return "\n".join(blocks)


def render_job_config(script: str, description: str = "") -> str:
    """Render the config.xml of a sandboxed Pipeline job with no triggers."""

    return f"""<?xml version='1.1' encoding='UTF-8'?>
<flow-definition plugin="workflow-job">
  <description>{escape_xml(description)}</description>
  <keepDependencies>false</keepDependencies>
  <properties>
    <org.jenkinsci.plugins.workflow.job.properties.PipelineTriggersJobProperty>
      <triggers/>
    </org.jenkinsci.plugins.workflow.job.properties.PipelineTriggersJobProperty>
    <hudson.model.ParametersDefinitionProperty>
      <parameterDefinitions>
{_parameter_definitions()}
      </parameterDefinitions>
    </hudson.model.ParametersDefinitionProperty>
  </properties>
  <definition class="org.jenkinsci.plugins.workflow.cps.CpsFlowDefinition" plugin="workflow-cps">
    <script>{escape_xml(script)}</script>
    <sandbox>true</sandbox>
  </definition>
  <triggers/>
  <disabled>false</disabled>
</flow-definition>
"""
